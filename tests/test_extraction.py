"""
Tests for the extraction module – text, statuses, tables, forms, XML.
"""

import unittest

from neufbox_watcher.errors import ExtractionError, ExtractionErrorKind
from neufbox_watcher.extraction.ajax_xml import child_attr, child_int, child_text, parse_xml
from neufbox_watcher.extraction.forms import form_snapshot
from neufbox_watcher.extraction.html_parser import normalize_text, trim
from neufbox_watcher.extraction.status import StatusValue, status_as_string, status_at
from neufbox_watcher.extraction.tables import headered_table, key_value_table


STATE_PAGE = """
<html><body>
<table id="state">
  <tr><th>Internet</th><td id="internet_status" class="enabled">Connecté</td></tr>
  <tr><th>Téléphone</th><td id="voip_status" class="disabled">Déconnecté</td></tr>
  <tr><th>TV</th><td id="tv_status" class="unused">Inutilisé</td></tr>
  <tr><th>IPv6</th><td id="internet_status_v6" class="blinking">?</td></tr>
  <tr><th>Hotspot</th><td id="hotspot_status">?</td></tr>
</table>
</body></html>
"""

ADSL_PAGE = """
<html><body>
<div id="content">
<table id="adsl_info">
  <tr><th>Débit flux descendant</th><td>15999 Kbps</td></tr>
  <tr><th>Débit flux
        montant</th><td>1021&nbsp;Kbps&nbsp;</td></tr>
  <tr><th>Vide</th><td>   </td></tr>
  <tr><td>Sans label</td></tr>
</table>
</div>
</body></html>
"""

CLIENTS_PAGE = """
<html><body>
<table id="network_clients">
  <thead><tr><th>Nom</th><th>Adresse IP</th></tr></thead>
  <tbody>
    <tr><td>laptop</td><td>192.168.1.10</td><td><img src="w.png" alt="wifi"/></td></tr>
    <tr><td>nas</td><td>192.168.1.20</td><td></td></tr>
  </tbody>
</table>
</body></html>
"""

FORM_PAGE = """
<html><body>
<table id="access_point_config">
  <tr><td><input type="radio" name="ap_active" value="on" checked="checked"/>
          <input type="radio" name="ap_active" value="off"/></td></tr>
  <tr><td><input type="text" name="ap_ssid" value="NEUF_1234"/></td></tr>
  <tr><td><input type="checkbox" name="ap_closed" value="1"/></td></tr>
  <tr><td><input type="hidden" name="token"/></td></tr>
  <tr><td><input type="text" value="unnamed"/></td></tr>
  <tr><td><select name="ap_channel">
      <option value="auto">Auto</option>
      <option value="6" selected="selected">6</option>
  </select></td></tr>
  <tr><td><select name="ap_mode">
      <option selected>  11b </option>
      <option selected>11g</option>
  </select></td></tr>
</table>
<input type="text" name="outside" value="x"/>
</body></html>
"""


class TestTextNormalisation(unittest.TestCase):
    def test_newline_and_spaces_collapse(self):
        self.assertEqual(normalize_text("a\n  b"), "a b")

    def test_crlf_removed(self):
        self.assertEqual(normalize_text("foo\r\nbar"), "foobar")

    def test_nbsp_trimmed(self):
        self.assertEqual(normalize_text("\xa0 value \xa0"), "value")

    def test_trim_keeps_inner_spaces(self):
        self.assertEqual(trim("  a  b\xa0"), "a  b")


class TestStatus(unittest.TestCase):
    def test_enabled_is_connected(self):
        self.assertEqual(status_at(STATE_PAGE, "td#internet_status"), StatusValue.CONNECTED)

    def test_disabled_is_not_connected(self):
        self.assertEqual(status_at(STATE_PAGE, "td#voip_status"), StatusValue.NOT_CONNECTED)

    def test_unused(self):
        self.assertEqual(status_at(STATE_PAGE, "td#tv_status"), StatusValue.UNUSED)

    def test_unrecognised_class_is_unknown(self):
        self.assertEqual(status_at(STATE_PAGE, "td#internet_status_v6"), StatusValue.UNKNOWN)

    def test_no_class_is_unknown(self):
        self.assertEqual(status_at(STATE_PAGE, "td#hotspot_status"), StatusValue.UNKNOWN)

    def test_extra_class_token_is_unknown(self):
        html = '<table><tr><td id="s" class="disabled blink">?</td></tr></table>'
        self.assertEqual(status_at(html, "td#s"), StatusValue.UNKNOWN)

    def test_missing_node(self):
        with self.assertRaises(ExtractionError) as ctx:
            status_at(STATE_PAGE, "td#nowhere")
        self.assertEqual(ctx.exception.kind, ExtractionErrorKind.NOT_FOUND)

    def test_labels(self):
        self.assertEqual(status_as_string(StatusValue.CONNECTED), "Connected")
        self.assertEqual(status_as_string(StatusValue.NOT_CONNECTED), "Not Connected")
        self.assertEqual(status_as_string(StatusValue.UNKNOWN), "Unknown")


class TestKeyValueTable(unittest.TestCase):
    def test_rows_extracted_and_normalised(self):
        data = key_value_table(ADSL_PAGE, "table#adsl_info")
        self.assertEqual(data, {
            "Débit flux descendant": "15999 Kbps",
            "Débit flux montant": "1021 Kbps",
        })

    def test_order_preserved(self):
        data = key_value_table(ADSL_PAGE, "table#adsl_info")
        self.assertEqual(list(data), ["Débit flux descendant", "Débit flux montant"])

    def test_missing_table(self):
        with self.assertRaises(ExtractionError) as ctx:
            key_value_table(ADSL_PAGE, "table#ppp_info")
        self.assertEqual(ctx.exception.kind, ExtractionErrorKind.NOT_FOUND)

    def test_selector_on_non_table(self):
        with self.assertRaises(ExtractionError) as ctx:
            key_value_table(ADSL_PAGE, "div#content")
        self.assertEqual(ctx.exception.kind, ExtractionErrorKind.WRONG_NODE_TYPE)

    def test_nested_table_rows_ignored(self):
        html = (
            '<table id="t"><tr><th>A</th><td>1</td></tr>'
            '<tr><td><table><tr><th>B</th><td>2</td></tr></table></td></tr></table>'
        )
        self.assertEqual(key_value_table(html, "table#t"), {"A": "1"})


class TestHeaderedTable(unittest.TestCase):
    def test_rows_keyed_by_headers(self):
        rows = headered_table(CLIENTS_PAGE, "table#network_clients")
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0]["Nom"], "laptop")
        self.assertEqual(rows[0]["Adresse IP"], "192.168.1.10")

    def test_extra_cells_get_synthetic_names(self):
        rows = headered_table(CLIENTS_PAGE, "table#network_clients")
        self.assertIn("{Column 2}", rows[0])

    def test_image_alt_used_for_empty_cell(self):
        rows = headered_table(CLIENTS_PAGE, "table#network_clients")
        self.assertEqual(rows[0]["{Column 2}"], "wifi")
        self.assertEqual(rows[1]["{Column 2}"], "")

    def test_rows_without_data_cells_skipped(self):
        html = (
            '<table id="t"><thead><tr><th>A</th></tr></thead><tbody>'
            '<tr><td>1</td></tr><tr><th>Section</th></tr><tr></tr>'
            '<tr><td>2</td></tr></tbody></table>'
        )
        self.assertEqual(headered_table(html, "table#t"), [{"A": "1"}, {"A": "2"}])


class TestFormSnapshot(unittest.TestCase):
    def setUp(self):
        self.form = form_snapshot(FORM_PAGE, "table#access_point_config")

    def test_checked_radio_only(self):
        self.assertEqual(self.form["ap_active"], "on")

    def test_unchecked_checkbox_absent(self):
        self.assertNotIn("ap_closed", self.form)

    def test_text_and_hidden_inputs(self):
        self.assertEqual(self.form["ap_ssid"], "NEUF_1234")
        self.assertEqual(self.form["token"], "")

    def test_unnamed_and_out_of_scope_inputs_skipped(self):
        self.assertNotIn("outside", self.form)
        self.assertNotIn("", self.form)

    def test_selected_option_value(self):
        self.assertEqual(self.form["ap_channel"], "6")

    def test_last_selected_option_wins_and_text_fallback(self):
        self.assertEqual(self.form["ap_mode"], "11g")

    def test_missing_scope(self):
        with self.assertRaises(ExtractionError):
            form_snapshot(FORM_PAGE, "form#form_nat")


class TestAjaxXml(unittest.TestCase):
    def test_parse_and_read(self):
        root = parse_xml(
            '<?xml version="1.0"?>\n<rsp><id> 12 </id><sent>4</sent>'
            '<status val="running"/></rsp>'
        )
        self.assertEqual(child_text(root, "id"), "12")
        self.assertEqual(child_int(root, "sent"), 4)
        self.assertEqual(child_attr(root, "status", "val"), "running")

    def test_missing_children(self):
        root = parse_xml("<rsp/>")
        self.assertEqual(child_text(root, "id"), "")
        self.assertEqual(child_int(root, "sent"), 0)
        self.assertEqual(child_attr(root, "status", "val"), "")

    def test_invalid_xml(self):
        self.assertIsNone(parse_xml("<html><body>oops"))


if __name__ == "__main__":
    unittest.main()
