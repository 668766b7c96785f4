"""Tests for content domain models."""

from datetime import UTC, datetime

import pydantic
import pytest
from wallstudio.content.models import (
    ContentDraft,
    ContentRecord,
    ContentVariant,
    DoubleContent,
    LiveContent,
    ParallaxConfig,
    ParallaxContent,
    ParallaxLayer,
    SubmissionPayload,
    WallpaperContent,
)


def _make_record(content, **kwargs) -> ContentRecord:
    return ContentRecord(
        id=kwargs.pop("id", "rec-1"),
        title=kwargs.pop("title", "Ocean"),
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
        updated_at=datetime(2026, 1, 2, tzinfo=UTC),
        content=content,
        **kwargs,
    )


class TestContentVariant:
    def test_values(self):
        assert {v.value for v in ContentVariant} == {"WALLPAPER", "LIVE", "PARALLAX", "DOUBLE"}


class TestParallaxModels:
    def test_defaults(self):
        config = ParallaxConfig()
        assert config.sensitivity == 0.1
        assert config.parallax_strength == 15
        assert config.invert_x is False
        assert config.invert_y is False
        assert config.layers == ()

    def test_parses_wire_names(self):
        config = ParallaxConfig.model_validate(
            {
                "sensitivity": 0.4,
                "parallaxStrength": 25,
                "invertX": True,
                "layers": [{"imageUrl": "fg.png", "zIndex": 1, "moveSpeed": 1.2}],
            }
        )
        assert config.parallax_strength == 25
        assert config.invert_x is True
        assert config.layers[0].image_url == "fg.png"
        assert config.layers[0].move_speed == 1.2

    def test_wire_output_is_camel_case(self):
        wire = ParallaxConfig(layers=(ParallaxLayer(image_url="a.png"),)).to_wire()
        assert set(wire) == {"sensitivity", "parallaxStrength", "invertX", "invertY", "layers"}
        assert set(wire["layers"][0]) == {"imageUrl", "zIndex", "moveSpeed", "blurAmount", "opacity"}

    def test_layers_are_frozen(self):
        layer = ParallaxLayer()
        with pytest.raises(pydantic.ValidationError):
            layer.opacity = 0.5


class TestContentRecord:
    def test_variant_follows_content(self):
        assert _make_record(WallpaperContent(primary_image="a.png")).variant == ContentVariant.WALLPAPER
        assert _make_record(LiveContent(primary_video="a.mp4")).variant == ContentVariant.LIVE
        double = DoubleContent(image_a="a.png", image_b="b.png")
        assert _make_record(double).variant == ContentVariant.DOUBLE

    def test_content_discriminated_from_dict(self):
        record = ContentRecord.model_validate(
            {
                "id": "r",
                "title": "t",
                "content": {"kind": "DOUBLE", "imageA": "a.png", "imageB": "b.png"},
            }
        )
        assert isinstance(record.content, DoubleContent)
        assert record.content.image_b == "b.png"

    def test_from_wire_reads_only_own_slots(self):
        record = ContentRecord.from_wire(
            {
                "id": "r1",
                "title": "Dunes",
                "variant": "WALLPAPER",
                "primaryImage": "dunes.png",
                "imageA": "stale.png",
                "tags": ["desert"],
                "downloads": 7,
            }
        )
        assert record.content == WallpaperContent(primary_image="dunes.png")
        assert record.tags == ["desert"]
        assert record.downloads == 7

    def test_from_wire_live_metadata(self):
        record = ContentRecord.from_wire(
            {"id": "r1", "title": "Clip", "variant": "LIVE", "primaryVideo": "clip.mp4", "videoDuration": 12}
        )
        assert isinstance(record.content, LiveContent)
        assert record.content.duration == 12
        assert record.content.quality is None

    @pytest.mark.parametrize(
        ("variant", "present", "missing"),
        [
            ("WALLPAPER", {}, "primaryImage"),
            ("LIVE", {"primaryImage": "stale.png"}, "primaryVideo"),
            ("DOUBLE", {"imageA": "a.png"}, "imageB"),
            ("PARALLAX", {"primaryImage": "fg.png"}, "parallaxConfig"),
        ],
    )
    def test_from_wire_missing_slot_raises(self, variant, present, missing):
        with pytest.raises(ValueError, match=f"{variant} record has no {missing}"):
            ContentRecord.from_wire({"id": "r1", "title": "t", "variant": variant, **present})

    def test_from_wire_parallax(self):
        record = ContentRecord.from_wire(
            {
                "id": "r1",
                "title": "Depth",
                "variant": "PARALLAX",
                "parallaxConfig": {"layers": [{"imageUrl": "fg.png"}]},
            }
        )
        assert isinstance(record.content, ParallaxContent)
        assert record.content.config.layers[0].image_url == "fg.png"

    def test_to_wire_is_flat(self):
        record = _make_record(DoubleContent(image_a="a.png", image_b="b.png"), tags=["love"])
        wire = record.to_wire()
        assert wire["variant"] == "DOUBLE"
        assert wire["imageA"] == "a.png"
        assert wire["imageB"] == "b.png"
        assert "content" not in wire
        assert wire["createdAt"].startswith("2026-01-01")

    def test_wire_round_trip(self):
        record = _make_record(LiveContent(primary_video="v.mp4", quality="4K"), featured=True)
        assert ContentRecord.from_wire(record.to_wire()) == record


class TestSubmissionPayload:
    def test_to_wire_skips_unset_slots(self):
        payload = SubmissionPayload(
            title="Ocean",
            variant=ContentVariant.WALLPAPER,
            category="ST_Ocean",
            primary_image="o.png",
        )
        wire = payload.to_wire()
        assert wire["primaryImage"] == "o.png"
        for key in ("primaryVideo", "imageA", "imageB", "parallaxConfig"):
            assert key not in wire


class TestContentDraft:
    def test_defaults(self):
        draft = ContentDraft()
        assert draft.variant is None
        assert draft.active is True
        assert draft.parallax_config is None

    def test_from_record_joins_tags(self):
        record = _make_record(WallpaperContent(primary_image="a.png"), tags=["a", "b"])
        draft = ContentDraft.from_record(record)
        assert draft.tags == "a, b"
        assert draft.primary_image == "a.png"
        assert draft.variant == ContentVariant.WALLPAPER

    def test_from_record_parallax(self):
        config = ParallaxConfig(layers=(ParallaxLayer(image_url="fg.png"),))
        draft = ContentDraft.from_record(_make_record(ParallaxContent(config=config)))
        assert draft.parallax_config == config

    def test_accepts_tag_list(self):
        draft = ContentDraft(tags=["x", "y"])
        assert draft.tags == ["x", "y"]
