"""Tests for draft validation, payload assembly and submission."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from wallstudio.backends.base import Session
from wallstudio.backends.local import LocalStore
from wallstudio.content.assembler import assemble, draft_problems, parse_tags, submit
from wallstudio.content.models import (
    ContentDraft,
    ContentRecord,
    ContentVariant,
    ParallaxConfig,
    WallpaperContent,
)
from wallstudio.content.parallax import add_layer, update_layer
from wallstudio.errors import RemoteError, ValidationError

SESSION = Session(token="t0k3n", username="admin", role="admin")


def _draft(**kwargs) -> ContentDraft:
    base = {"title": "Ocean", "category": "ST_Ocean"}
    base.update(kwargs)
    return ContentDraft(**base)


def _parallax(layers: int = 1, first_image: str = "fg.png") -> ParallaxConfig:
    config = ParallaxConfig()
    for _ in range(layers):
        config = add_layer(config)
    return update_layer(config, 0, {"imageUrl": first_image})


def _mock_backend() -> MagicMock:
    backend = MagicMock()
    record = ContentRecord(id="r1", title="Ocean", content=WallpaperContent(primary_image="o.png"))
    backend.create_record = AsyncMock(return_value=record)
    backend.update_record = AsyncMock(return_value=record)
    return backend


class TestParseTags:
    def test_trims_and_drops_empties(self):
        assert parse_tags(" nature,  landscape ,mountains,") == ["nature", "landscape", "mountains"]

    def test_keeps_duplicates_and_order(self):
        assert parse_tags("sky, sea, sky") == ["sky", "sea", "sky"]

    def test_empty_inputs(self):
        assert parse_tags("") == []
        assert parse_tags(" , ,") == []
        assert parse_tags(None) == []

    def test_list_input(self):
        assert parse_tags([" a ", "", "b"]) == ["a", "b"]


class TestAssemble:
    def test_wallpaper(self):
        payload = assemble(_draft(variant="WALLPAPER", primary_image="o.png", tags="sea, blue"))
        assert payload.variant == ContentVariant.WALLPAPER
        assert payload.primary_image == "o.png"
        assert payload.tags == ["sea", "blue"]
        assert payload.category == "ST_Ocean"

    def test_stale_slots_ignored(self):
        draft = _draft(
            variant="WALLPAPER",
            primary_image="o.png",
            image_a="left.png",
            primary_video="old.mp4",
            parallax_config=ParallaxConfig(),
        )
        wire = assemble(draft).to_wire()
        assert wire["primaryImage"] == "o.png"
        for key in ("imageA", "imageB", "primaryVideo", "parallaxConfig"):
            assert key not in wire

    def test_switching_variant_keeps_data(self):
        draft = _draft(variant="DOUBLE", primary_image="o.png", image_a="l.png", image_b="r.png")
        assert assemble(draft).image_a == "l.png"
        draft.variant = ContentVariant.WALLPAPER
        assert assemble(draft).primary_image == "o.png"
        draft.variant = ContentVariant.DOUBLE
        assert assemble(draft).image_b == "r.png"

    def test_double_needs_both_images(self):
        with pytest.raises(ValidationError) as excinfo:
            assemble(_draft(variant="DOUBLE", image_a="l.png"))
        assert excinfo.value.problems == ["imageB is required for DOUBLE"]

    def test_live_carries_video_metadata(self):
        payload = assemble(
            _draft(variant="LIVE", primary_video="v.mp4", video_duration=15, video_quality="1080p")
        )
        assert payload.primary_video == "v.mp4"
        assert payload.video_duration == 15
        assert payload.video_quality == "1080p"

    def test_live_without_video(self):
        with pytest.raises(ValidationError, match="primaryVideo is required for LIVE"):
            assemble(_draft(variant="LIVE", primary_image="o.png"))

    def test_reports_every_missing_field(self):
        problems = draft_problems(ContentDraft())
        assert problems == ["title is required", "category is required", "variant is required"]

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="title is required"):
            assemble(_draft(title="   ", variant="WALLPAPER", primary_image="o.png"))

    def test_thumbnail_only_when_set(self):
        assert assemble(_draft(variant="WALLPAPER", primary_image="o.png")).thumbnail_url is None
        payload = assemble(_draft(variant="WALLPAPER", primary_image="o.png", thumbnail_url="t.png"))
        assert payload.thumbnail_url == "t.png"


class TestAssembleParallax:
    def test_missing_config(self):
        with pytest.raises(ValidationError, match="at least one layer"):
            assemble(_draft(variant="PARALLAX"))

    def test_zero_layers(self):
        with pytest.raises(ValidationError, match="at least one layer"):
            assemble(_draft(variant="PARALLAX", parallax_config=ParallaxConfig()))

    def test_first_layer_without_image(self):
        with pytest.raises(ValidationError, match=r"layers\[0\] needs an image"):
            assemble(_draft(variant="PARALLAX", parallax_config=_parallax(first_image="")))

    def test_out_of_range_field(self):
        config = update_layer(_parallax(), 0, {"blurAmount": 25})
        with pytest.raises(ValidationError, match="blurAmount"):
            assemble(_draft(variant="PARALLAX", parallax_config=config))

    def test_drops_imageless_optional_layers(self):
        config = update_layer(_parallax(layers=3), 2, {"imageUrl": "bg.png", "moveSpeed": 0.5})
        payload = assemble(_draft(variant="PARALLAX", parallax_config=config))
        layers = payload.parallax_config.layers
        assert [layer.z_index for layer in layers] == [1, 3]
        assert [layer.image_url for layer in layers] == ["fg.png", "bg.png"]

    def test_valid_config_passes_through(self):
        config = _parallax(layers=2)
        config = update_layer(config, 1, {"imageUrl": "mid.png"})
        payload = assemble(_draft(variant="PARALLAX", parallax_config=config))
        assert payload.parallax_config == config


class TestSubmit:
    def test_invalid_parallax_never_reaches_backend(self):
        backend = _mock_backend()
        draft = _draft(variant="PARALLAX", parallax_config=_parallax(first_image=""))
        with pytest.raises(ValidationError):
            asyncio.run(submit(draft, backend, SESSION))
        backend.create_record.assert_not_called()
        backend.update_record.assert_not_called()

    def test_create(self):
        backend = _mock_backend()
        asyncio.run(submit(_draft(variant="WALLPAPER", primary_image="o.png"), backend, SESSION))
        backend.create_record.assert_awaited_once()
        session, payload = backend.create_record.await_args.args
        assert session is SESSION
        assert payload.primary_image == "o.png"

    def test_update_sends_wire_payload(self):
        backend = _mock_backend()
        draft = _draft(variant="WALLPAPER", primary_image="o.png")
        asyncio.run(submit(draft, backend, SESSION, record_id="r1"))
        backend.create_record.assert_not_called()
        session, record_id, partial = backend.update_record.await_args.args
        assert record_id == "r1"
        assert partial["primaryImage"] == "o.png"
        assert partial["variant"] == "WALLPAPER"

    def test_remote_error_propagates(self):
        backend = _mock_backend()
        backend.create_record.side_effect = RemoteError("title already taken", status_code=409)
        with pytest.raises(RemoteError, match="title already taken"):
            asyncio.run(submit(_draft(variant="WALLPAPER", primary_image="o.png"), backend, SESSION))

    def test_against_local_store(self, tmp_path: Path):
        store = LocalStore(tmp_path)
        draft = _draft(variant="DOUBLE", image_a="l.png", image_b="r.png", tags="couple, love")
        record = asyncio.run(submit(draft, store, SESSION))
        assert record.variant == ContentVariant.DOUBLE
        fetched = asyncio.run(store.get_record(SESSION, record.id))
        assert fetched.content.image_a == "l.png"
        assert fetched.tags == ["couple", "love"]

    def test_edit_round_trip(self, tmp_path: Path):
        store = LocalStore(tmp_path)
        record = asyncio.run(submit(_draft(variant="WALLPAPER", primary_image="o.png"), store, SESSION))
        draft = ContentDraft.from_record(record)
        draft.variant = ContentVariant.LIVE
        draft.primary_video = "o.mp4"
        updated = asyncio.run(submit(draft, store, SESSION, record_id=record.id))
        assert updated.id == record.id
        assert updated.variant == ContentVariant.LIVE
        assert updated.content.primary_video == "o.mp4"
