"""Tests for the state model and wire-value mapping."""

import pytest

from mpris_controls.state import (
    NO_MEDIA_TEXT,
    PlaybackState,
    StateModel,
    ms_to_us,
    parse_metadata,
    seek_target_ms,
    us_to_ms,
)


class TestPlaybackState:
    """Test PlaybackState parsing."""

    def test_from_wire(self):
        assert PlaybackState.from_wire("Playing") is PlaybackState.PLAYING
        assert PlaybackState.from_wire("Paused") is PlaybackState.PAUSED
        assert PlaybackState.from_wire("Stopped") is PlaybackState.STOPPED

    def test_unknown_status_is_stopped(self):
        assert PlaybackState.from_wire("playing") is PlaybackState.STOPPED
        assert PlaybackState.from_wire("") is PlaybackState.STOPPED
        assert PlaybackState.from_wire(None) is PlaybackState.STOPPED

    def test_icon_names(self):
        assert PlaybackState.PLAYING.icon_name == "media-playback-start"
        assert PlaybackState.PAUSED.icon_name == "media-playback-pause"
        assert PlaybackState.STOPPED.icon_name == "media-playback-stop"


class TestUnitConversion:
    """Test microsecond/millisecond conversion."""

    def test_us_to_ms_truncates(self):
        assert us_to_ms(1999) == 1
        assert us_to_ms(1000) == 1
        assert us_to_ms(999) == 0
        assert us_to_ms(-1999) == -1

    def test_ms_round_trip_is_exact(self):
        for ms in (0, 1, 999, 123456, 3 * 60 * 60 * 1000):
            assert us_to_ms(ms_to_us(ms)) == ms

    def test_repeated_conversion_does_not_drift(self):
        us = 187_654_321
        value = us_to_ms(us)
        for _ in range(10):
            value = us_to_ms(ms_to_us(value))
        assert value == 187_654
        assert us - ms_to_us(value) < 1000

    @pytest.mark.parametrize("percent, duration, expected", [
        (0, 180_000, 0),
        (50, 180_000, 90_000),
        (100, 180_000, 180_000),
        (33, 1_001, 330),
    ])
    def test_seek_target(self, percent, duration, expected):
        assert seek_target_ms(percent, duration) == expected


class TestParseMetadata:
    """Test Metadata mapping."""

    def test_full_metadata(self):
        fields = parse_metadata({
            "xesam:title": "So What",
            "xesam:artist": ["Miles Davis", "John Coltrane"],
            "xesam:album": "Kind of Blue",
            "mpris:length": 562_000_999,
        })
        assert fields == {
            "title": "So What",
            "artist": "Miles Davis, John Coltrane",
            "album": "Kind of Blue",
            "duration_ms": 562_000,
        }

    def test_missing_fields_are_empty(self):
        fields = parse_metadata({})
        assert fields == {"title": "", "artist": "", "album": "", "duration_ms": 0}

    def test_artist_as_plain_string(self):
        assert parse_metadata({"xesam:artist": "Nina Simone"})["artist"] == "Nina Simone"

    def test_invalid_length_is_unknown(self):
        assert parse_metadata({"mpris:length": "n/a"})["duration_ms"] == 0
        assert parse_metadata({"mpris:length": -5000})["duration_ms"] == 0

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            parse_metadata(["xesam:title"])


class TestStateModel:
    """Test StateModel helpers."""

    def test_new_model_is_empty(self):
        model = StateModel()
        assert model.is_empty
        assert model.player == ""
        assert model.playback_state is PlaybackState.STOPPED
        assert model.has_position is False

    def test_clear_restores_invariant(self):
        model = StateModel()
        model.player = "org.mpris.MediaPlayer2.vlc"
        model.title = "Track"
        model.duration_ms = 1000
        model.position_ms = 500
        model.has_position = True
        model.playback_state = PlaybackState.PLAYING
        model.clear()
        assert model.is_empty

    def test_copy_is_independent(self):
        model = StateModel()
        model.title = "Original"
        snapshot = model.copy()
        model.title = "Changed"
        assert snapshot.title == "Original"
        assert snapshot != model

    def test_position_percent(self):
        model = StateModel()
        assert model.position_percent == 0
        model.duration_ms = 200_000
        model.position_ms = 50_000
        assert model.position_percent == 25

    def test_track_info(self):
        model = StateModel()
        assert model.track_info == NO_MEDIA_TEXT
        model.title = "Blue in Green"
        assert model.track_info == "Blue in Green"
        model.artist = "Miles Davis"
        assert model.track_info == "Blue in Green\nMiles Davis"

    def test_play_pause_label(self):
        model = StateModel()
        assert model.play_pause_label == "Play"
        model.playback_state = PlaybackState.PLAYING
        assert model.play_pause_label == "Pause"
