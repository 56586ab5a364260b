"""
Basic tests for PDF utilities, sanitization and configuration
"""

import json
import os
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Test if core dependencies are available
try:
    import fitz
    import pikepdf
    import click
    DEPS_AVAILABLE = True
except ImportError:
    DEPS_AVAILABLE = False

if DEPS_AVAILABLE:
    from pdf_samples import SECRET, make_pdf, rect
    from rectredact import RedactionConfig, apply_redactions
    from rectredact.errors import InvalidRectangleError
    from rectredact.sanitize import sanitize_document, sanitize_file
    from rectredact.utils import (
        format_file_size,
        get_color,
        get_pdf_info,
        load_rectangles,
        validate_pdf,
        verify_redaction,
    )


class TestBasicFunctionality(unittest.TestCase):
    """Test utilities against small generated PDFs"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, name, data):
        path = os.path.join(self.temp_dir, name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_validate_nonexistent_pdf(self):
        """Test PDF validation with non-existent file"""
        fake_path = os.path.join(self.temp_dir, "nonexistent.pdf")
        self.assertFalse(validate_pdf(fake_path))

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_validate_garbage(self):
        path = self._write("garbage.pdf", b"definitely not a pdf")
        self.assertFalse(validate_pdf(path))

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_pdf_info(self):
        """Test creating and inspecting a minimal PDF"""
        pdf_path = self._write("test.pdf", make_pdf(SECRET, SECRET))

        self.assertTrue(validate_pdf(pdf_path))

        info = get_pdf_info(pdf_path)
        self.assertTrue(info["valid"])
        self.assertEqual(info["pages"], 2)
        self.assertFalse(info["encrypted"])
        self.assertEqual(info["page_sizes"][0], (600, 800))
        self.assertGreater(info["file_size"], 0)

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_verify_redaction(self):
        """Text under an overlay is reported until its text object is removed"""
        pdf_bytes = make_pdf(SECRET)
        # Covers the glyphs of "Secret" drawn at baseline 700
        r = rect(x=95, y=85, width=60, height=25)

        self.assertEqual(len(verify_redaction(pdf_bytes, [r])), 1)

        redacted, removed = apply_redactions(pdf_bytes, [r])
        self.assertEqual(removed, 1)
        self.assertEqual(verify_redaction(redacted, [r]), [])

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_load_rectangles_list_and_payload(self):
        rects = [rect(), rect(page_index=1)]
        list_path = os.path.join(self.temp_dir, "list.json")
        payload_path = os.path.join(self.temp_dir, "payload.json")
        with open(list_path, "w") as f:
            json.dump(rects, f)
        with open(payload_path, "w") as f:
            json.dump({"filename": "upload.pdf", "redactions": rects}, f)

        self.assertEqual(load_rectangles(list_path), rects)
        self.assertEqual(load_rectangles(payload_path), rects)

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_load_rectangles_rejects_other_shapes(self):
        path = os.path.join(self.temp_dir, "bad.json")
        with open(path, "w") as f:
            json.dump({"rects": []}, f)
        with self.assertRaises(InvalidRectangleError):
            load_rectangles(path)

        with open(path, "w") as f:
            f.write("{not json")
        with self.assertRaises(InvalidRectangleError):
            load_rectangles(path)

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_colors(self):
        self.assertEqual(get_color("black"), (0.0, 0.0, 0.0))
        self.assertEqual(get_color("White"), (1.0, 1.0, 1.0))
        self.assertEqual(get_color("mauve"), (0.0, 0.0, 0.0))

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_format_file_size(self):
        self.assertEqual(format_file_size(512), "512.0 B")
        self.assertEqual(format_file_size(2048), "2.0 KB")


class TestSanitize(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _dirty_pdf(self):
        import io
        pdf = pikepdf.open(io.BytesIO(make_pdf(SECRET)))
        pdf.docinfo["/Title"] = "Payroll"
        pdf.docinfo["/Author"] = "Jane Q. Public"
        pdf.Root.OpenAction = pikepdf.Dictionary(S=pikepdf.Name.JavaScript, JS="app.alert(1)")
        pdf.pages[0].obj.Thumb = pdf.make_stream(b"thumbnail")
        return pdf

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_sanitize_document(self):
        pdf = self._dirty_pdf()
        removed = sanitize_document(pdf)

        self.assertGreaterEqual(removed, 4)
        self.assertNotIn("/Title", pdf.docinfo)
        self.assertNotIn("/OpenAction", pdf.Root)
        self.assertNotIn("/Thumb", pdf.pages[0].obj)
        pdf.close()

    @unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
    def test_sanitize_file(self):
        input_path = os.path.join(self.temp_dir, "dirty.pdf")
        output_path = os.path.join(self.temp_dir, "clean.pdf")
        pdf = self._dirty_pdf()
        pdf.save(input_path)
        pdf.close()

        self.assertGreaterEqual(sanitize_file(input_path, output_path), 4)
        with pikepdf.open(output_path) as clean:
            self.assertNotIn("/Author", clean.docinfo)


@unittest.skipUnless(DEPS_AVAILABLE, "Core dependencies not available")
class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = RedactionConfig()
        self.assertEqual(config.default_font_size, 12.0)
        self.assertEqual(config.fill, (0.0, 0.0, 0.0))
        self.assertEqual(config.under_fill, (1.0, 1.0, 1.0))
        self.assertFalse(config.carry_state_across_streams)
        self.assertIsNone(config.watermark)

    def test_overrides(self):
        config = RedactionConfig(min_padding=2, watermark="X")
        self.assertEqual(config.min_padding, 2)
        self.assertIn("watermark='X'", repr(config))

    def test_unknown_option(self):
        with self.assertRaises(TypeError):
            RedactionConfig(padding=3)


if __name__ == "__main__":
    if not DEPS_AVAILABLE:
        print("Warning: Core dependencies not available. Install with:")
        print("pip install PyMuPDF pikepdf click")
        print("Running limited tests...")

    unittest.main()
