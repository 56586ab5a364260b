"""
Tests for the text object redactor state machine
"""

import unittest

from rectredact.config import RedactionConfig
from rectredact.geometry import PdfBox
from rectredact.textobj import (
    IDENTITY,
    REMOVAL_MARKER,
    ScanState,
    multiply,
    redact_text_objects,
)

SECRET = "BT /F1 12 Tf 100 700 Td (Secret) Tj ET"


class TestMultiply(unittest.TestCase):

    def test_identity(self):
        m = (2.0, 0.5, -0.5, 3.0, 10.0, 20.0)
        self.assertEqual(multiply(IDENTITY, m), m)
        self.assertEqual(multiply(m, IDENTITY), m)

    def test_translation_is_scaled_by_current_matrix(self):
        self.assertEqual(multiply((2, 0, 0, 2, 0, 0), (1, 0, 0, 1, 10, 20)),
                         (2, 0, 0, 2, 20, 40))

    def test_formula(self):
        m = (1, 2, 3, 4, 5, 6)
        n = (7, 8, 9, 10, 11, 12)
        self.assertEqual(multiply(m, n), (
            1 * 7 + 3 * 8, 2 * 7 + 4 * 8,
            1 * 9 + 3 * 10, 2 * 9 + 4 * 10,
            1 * 11 + 3 * 12 + 5, 2 * 11 + 4 * 12 + 6,
        ))


class TestRedactTextObjects(unittest.TestCase):

    def test_anchor_inside_removes_object(self):
        # Padded y range is [684, 730.4]
        text, removed = redact_text_objects(SECRET, PdfBox(100, 690, 80, 20))

        self.assertEqual(removed, 1)
        self.assertEqual(text, REMOVAL_MARKER)

    def test_anchor_below_padded_box_is_kept(self):
        # Padded y range is [724, 770.4]; the baseline at 700 is outside
        text, removed = redact_text_objects(SECRET, PdfBox(100, 730, 80, 20))

        self.assertEqual(removed, 0)
        self.assertEqual(text, SECRET)

    def test_non_matching_object_is_byte_identical(self):
        kept = "\nBT\n/F1 10 Tf\n1 0 0 1 400 100 Tm\n[(Keep) -20 (me)] TJ\nET"
        source = "q\n" + SECRET + kept + "\nQ\n"

        text, removed = redact_text_objects(source, PdfBox(100, 690, 80, 20))

        self.assertEqual(removed, 1)
        self.assertIn(kept, text)
        self.assertNotIn("Secret", text)
        self.assertTrue(text.startswith("q\n"))
        self.assertTrue(text.endswith("\nQ\n"))

    def test_leading_whitespace_survives_removal(self):
        source = "q\nBT\n100 700 Td\n(x) Tj\nET\nQ"
        text, removed = redact_text_objects(source, PdfBox(90, 690, 30, 20))

        self.assertEqual(removed, 1)
        self.assertEqual(text, "q\n" + REMOVAL_MARKER + "\nQ")

    def test_tm_replaces_matrix(self):
        source = "BT 1 0 0 1 300 400 Tm (x) Tj ET"
        _, removed = redact_text_objects(source, PdfBox(295, 395, 10, 10))
        self.assertEqual(removed, 1)

    def test_td_is_relative(self):
        source = "BT 1 0 0 1 300 400 Tm 0 -300 Td (x) Tj ET"
        _, removed = redact_text_objects(source, PdfBox(295, 95, 10, 10))
        self.assertEqual(removed, 1)

    def test_leading_moves_anchor_down(self):
        # Td anchor (100, 775) is above the padded box, TL moves it to 755
        source = "BT /F1 10 Tf 100 775 Td 20 TL (x) Tj ET"
        box = PdfBox(90, 740, 20, 3)

        _, removed = redact_text_objects(source, box)
        self.assertEqual(removed, 1)

        _, removed = redact_text_objects("BT /F1 10 Tf 100 775 Td (x) Tj ET", box)
        self.assertEqual(removed, 0)

    def test_show_text_tests_current_anchor(self):
        _, removed = redact_text_objects("BT (x) Tj ET", PdfBox(0, 0, 10, 10))
        self.assertEqual(removed, 1)

    def test_cm_outside_text_object_shifts_anchor(self):
        box = PdfBox(195, 0, 10, 10)

        _, removed = redact_text_objects("1 0 0 1 200 0 cm BT 0 0 Td (x) Tj ET", box)
        self.assertEqual(removed, 1)

        _, removed = redact_text_objects("BT 0 0 Td (x) Tj ET", box)
        self.assertEqual(removed, 0)

    def test_font_size_widens_padding(self):
        box = PdfBox(100, 730, 80, 20)
        # 60pt font: padding 30, so the baseline at 700 is within reach
        _, removed = redact_text_objects("BT /F1 60 Tf 100 700 Td (x) Tj ET", box)
        self.assertEqual(removed, 1)

    def test_each_object_counted_once(self):
        source = ("BT 1 0 0 1 100 700 Tm (a) Tj ET\n"
                  "BT 1 0 0 1 110 705 Tm (b) Tj ET\n"
                  "BT 1 0 0 1 120 702 Tm (c) Tj (d) Tj 0 1 Td (e) Tj ET")
        text, removed = redact_text_objects(source, PdfBox(100, 690, 80, 20))

        self.assertEqual(removed, 3)
        self.assertEqual(text.count(REMOVAL_MARKER), 3)

    def test_position_persists_between_text_objects(self):
        # BT does not reset the tracked matrix, so a second relative move
        # starts from where the first one ended
        source = SECRET + "\n" + SECRET
        text, removed = redact_text_objects(source, PdfBox(100, 690, 80, 20))

        self.assertEqual(removed, 1)
        self.assertTrue(text.endswith("\n" + SECRET))

    def test_unterminated_text_object_is_kept(self):
        source = "BT 100 700 Td (x) Tj"
        text, removed = redact_text_objects(source, PdfBox(90, 690, 30, 20))

        self.assertEqual(removed, 0)
        self.assertEqual(text, source)

    def test_short_operand_lists_leave_matrix(self):
        source = "BT 5 Tm 100 Td (x) Tj ET"
        _, removed = redact_text_objects(source, PdfBox(0, 0, 10, 10))
        self.assertEqual(removed, 1)

    def test_state_carried_across_streams(self):
        box = PdfBox(195, 0, 10, 10)
        state = ScanState()

        redact_text_objects("1 0 0 1 200 0 cm", box, state=state)
        _, removed = redact_text_objects("BT 0 0 Td (x) Tj ET", box, state=state)
        self.assertEqual(removed, 1)
        self.assertEqual(state.matrix[4], 200)

    def test_config_default_font_size(self):
        config = RedactionConfig(default_font_size=60)
        _, removed = redact_text_objects("BT 100 700 Td (x) Tj ET",
                                         PdfBox(100, 730, 80, 20), config)
        self.assertEqual(removed, 1)


if __name__ == "__main__":
    unittest.main()
