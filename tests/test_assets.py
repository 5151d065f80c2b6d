"""Tests for soundcue2graph.assets module."""

from soundcue2graph import (
    DEFAULT_ATTENUATION_PATH,
    asset_short_name,
    normalize_asset_path,
    resolve_asset_path,
)
from soundcue2graph.assets import ATTENUATION_KEYS, SOUND_WAVE_KEYS


class TestNormalizeAssetPath:
    """Tests for normalize_asset_path."""

    def test_adds_last_segment(self):
        assert normalize_asset_path("/Game/Audio/Boom") == "/Game/Audio/Boom.Boom"

    def test_already_normalized(self):
        assert normalize_asset_path("/Game/Audio/Boom.Boom") == "/Game/Audio/Boom.Boom"

    def test_strips_export_index(self):
        assert normalize_asset_path("/Game/Audio/Boom.3") == "/Game/Audio/Boom.Boom"
        assert normalize_asset_path("/Game/Audio/Boom.Boom.0") == "/Game/Audio/Boom.Boom"

    def test_trailing_slash(self):
        assert normalize_asset_path("/Game/Audio/Boom/") == "/Game/Audio/Boom.Boom"

    def test_whitespace(self):
        assert normalize_asset_path("  /Game/Audio/Boom  ") == "/Game/Audio/Boom.Boom"

    def test_class_wrapped(self):
        value = "SoundWave'/Game/Audio/Boom.Boom'"
        assert normalize_asset_path(value) == "/Game/Audio/Boom.Boom"

    def test_dotted_identifier(self):
        assert normalize_asset_path("Boom.Boom") == "Boom.Boom"

    def test_rejects_plain_words(self):
        assert normalize_asset_path("Boom") is None
        assert normalize_asset_path("") is None

    def test_rejects_numeric_suffix_without_path(self):
        assert normalize_asset_path("Boom.12") is None


class TestResolveAssetPath:
    """Tests for resolve_asset_path."""

    def test_string_value(self):
        props = {"SoundWave": "/Game/Audio/Boom"}
        assert resolve_asset_path(props, SOUND_WAVE_KEYS) == "/Game/Audio/Boom.Boom"

    def test_object_path(self):
        props = {"SoundWave": {"ObjectName": "SoundWave'Boom'", "ObjectPath": "/Game/Audio/Boom.0"}}
        assert resolve_asset_path(props, SOUND_WAVE_KEYS) == "/Game/Audio/Boom.Boom"

    def test_asset_path_name(self):
        props = {"SoundWaveAssetPtr": {"AssetPathName": "/Game/Audio/Boom.Boom", "SubPathString": ""}}
        assert resolve_asset_path(props, SOUND_WAVE_KEYS) == "/Game/Audio/Boom.Boom"

    def test_asset_field(self):
        props = {"Attenuation": {"Asset": "/Game/Audio/Att/Near"}}
        assert resolve_asset_path(props, ATTENUATION_KEYS) == "/Game/Audio/Att/Near.Near"

    def test_priority_order(self):
        props = {"SoundWave": "/Game/Audio/Low", "SoundWaveAssetPtr": "/Game/Audio/High.High"}
        assert resolve_asset_path(props, SOUND_WAVE_KEYS) == "/Game/Audio/High.High"

    def test_skips_unusable_candidates(self):
        props = {"SoundWaveAssetPtr": "nope", "SoundWave": "/Game/Audio/Boom"}
        assert resolve_asset_path(props, SOUND_WAVE_KEYS) == "/Game/Audio/Boom.Boom"

    def test_skips_empty_values(self):
        props = {"AttenuationSettings": None, "AttenuationAsset": "", "Attenuation": "/Game/A/Far"}
        assert resolve_asset_path(props, ATTENUATION_KEYS) == "/Game/A/Far.Far"

    def test_object_without_path_fields(self):
        props = {"AttenuationSettings": {"Name": "Far"}}
        assert resolve_asset_path(props, ATTENUATION_KEYS) is None

    def test_no_match(self):
        assert resolve_asset_path({"Other": "/Game/Audio/Boom"}, SOUND_WAVE_KEYS) is None
        assert resolve_asset_path({}, SOUND_WAVE_KEYS) is None

    def test_non_mapping_props(self):
        assert resolve_asset_path(None, SOUND_WAVE_KEYS) is None


class TestAssetShortName:
    """Tests for asset_short_name."""

    def test_normalized_path(self):
        assert asset_short_name("/Game/Audio/Boom.Boom") == "Boom"

    def test_default_attenuation(self):
        assert asset_short_name(DEFAULT_ATTENUATION_PATH) == "Default_Attenuation"

    def test_empty(self):
        assert asset_short_name(None) == ""
        assert asset_short_name("") == ""
