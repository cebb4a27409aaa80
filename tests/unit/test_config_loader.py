"""
Unit tests for the YAML configuration cascade.
"""
import unittest
import tempfile
from pathlib import Path

from slideflix.config.config_loader import ConfigLoader


class TestConfigLoader(unittest.TestCase):
    """Defaults, user overrides and environment overrides."""

    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp(prefix="test_config_"))
        self.missing = self.tmp_dir / "missing.yaml"

    def tearDown(self):
        import shutil
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _write_user_config(self, text: str) -> Path:
        path = self.tmp_dir / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_defaults_loaded(self):
        loader = ConfigLoader(user_config_path=str(self.missing), environ={})
        self.assertEqual(loader.get('encode', 'codec'), "libx264")
        self.assertEqual(loader.get('encode.crf'), 23)
        self.assertEqual(loader.get('composition', 'canvas', 'width'), 1920)
        self.assertEqual(loader.get('storage.supabase.bucket'), "generated-videos")

    def test_missing_key_returns_default(self):
        loader = ConfigLoader(user_config_path=str(self.missing), environ={})
        self.assertIsNone(loader.get('encode', 'nope'))
        self.assertEqual(loader.get('nope.deeper', default=5), 5)
        self.assertEqual(loader.get_section('does_not_exist'), {})

    def test_user_config_merges_recursively(self):
        path = self._write_user_config("composition:\n  canvas:\n    width: 1280\n")
        loader = ConfigLoader(user_config_path=str(path), environ={})
        self.assertEqual(loader.get('composition.canvas.width'), 1280)
        # Sibling keys survive the merge
        self.assertEqual(loader.get('composition.canvas.height'), 1080)
        self.assertEqual(loader.get('composition.frame_rate'), 25)

    def test_invalid_user_yaml_is_ignored(self):
        path = self._write_user_config("composition: [unclosed\n")
        loader = ConfigLoader(user_config_path=str(path), environ={})
        self.assertEqual(loader.get('composition.frame_rate'), 25)

    def test_env_override_with_underscored_key(self):
        loader = ConfigLoader(
            user_config_path=str(self.missing),
            environ={'SLIDEFLIX_ENCODE_TIMEOUT_SECONDS': '45'},
        )
        self.assertEqual(loader.get('encode.timeout_seconds'), 45)

    def test_env_override_nested_and_coerced(self):
        loader = ConfigLoader(
            user_config_path=str(self.missing),
            environ={
                'SLIDEFLIX_COMPOSITION_TRANSITION_DURATION_SECONDS': '0.75',
                'SLIDEFLIX_COMPOSITION_CANVAS_WIDTH': '1080',
                'SLIDEFLIX_ENCODE_FASTSTART': 'false',
                'SLIDEFLIX_STORAGE_SUPABASE_URL': 'https://abc.supabase.co',
            },
        )
        self.assertEqual(loader.get('composition.transition_duration_seconds'), 0.75)
        self.assertEqual(loader.get('composition.canvas.width'), 1080)
        self.assertIs(loader.get('encode.faststart'), False)
        self.assertEqual(loader.get('storage.supabase.url'), 'https://abc.supabase.co')

    def test_env_override_new_section(self):
        loader = ConfigLoader(
            user_config_path=str(self.missing),
            environ={'SLIDEFLIX_EXTRA_SOME_VALUE': 'x'},
        )
        self.assertEqual(loader.get('extra', 'some_value'), 'x')

    def test_unrelated_env_ignored(self):
        loader = ConfigLoader(
            user_config_path=str(self.missing),
            environ={'OTHER_ENCODE_CRF': '1', 'SLIDEFLIX_X': '1'},
        )
        self.assertEqual(loader.get('encode.crf'), 23)

    def test_env_cannot_nest_under_scalar(self):
        loader = ConfigLoader(
            user_config_path=str(self.missing),
            environ={'SLIDEFLIX_ENCODE_CRF_EXTRA': '1'},
        )
        self.assertEqual(loader.get('encode.crf'), 23)
