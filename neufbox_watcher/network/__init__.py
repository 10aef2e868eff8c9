"""Network submodule – HTTP transport to the device."""

from neufbox_watcher.network.client import RawResponse, Transport, base_url, build_session, encode_form

__all__ = ["RawResponse", "Transport", "base_url", "build_session", "encode_form"]
