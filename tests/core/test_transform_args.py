"""
Tests for convert argument synthesis
"""

import pytest

from api.exceptions import UnrecognizedVariantException
from core.iiif_parser import parse_image_request
from core.transform_args import format_number, synthesize
from schemas.iiif import SourceDimensions

SOURCE = "/data/images/cat.jpg"


def build(region="full", size="full", rotation="0", quality="default", fmt="jpg", **kwargs):
    request = parse_image_request("cat", region, size, rotation, quality, fmt)
    return synthesize(request, SOURCE, **kwargs)


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (10.0, "10"),
            (0.0, "0"),
            (60.1, "60.1"),
            (12.5, "12.5"),
            (360, "360"),
            (0.00001, "0.00001"),
            (1e-7, "0.0000001"),
        ],
    )
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestSynthesize:
    """Test argument vector construction"""

    def test_identity_request_has_only_input_and_sink(self):
        assert build() == [SOURCE, "jpg:-"]

    def test_sink_uses_requested_format(self):
        request = parse_image_request("cat", "full", "full", "0", "default", "png")
        assert synthesize(request, "/data/images/cat.png") == ["/data/images/cat.png", "png:-"]

    def test_exact_crop(self):
        assert build(region="10,20,30,40") == ["-crop", "30x40+10+20", "+repage", SOURCE, "jpg:-"]

    def test_percent_crop_resolves_offsets(self):
        dims = SourceDimensions(width=640, height=480)
        args = build(region="pct:10,25,50,40", dims=dims)
        assert args[:3] == ["-crop", "50%x40+64+120", "+repage"]

    def test_negative_percent_offsets_carry_their_own_sign(self):
        dims = SourceDimensions(width=1000, height=800)
        args = build(region="pct:-10,-5,50,50", dims=dims)
        assert args[:3] == ["-crop", "50%x50-100-40", "+repage"]

    def test_mixed_sign_percent_offsets(self):
        dims = SourceDimensions(width=1000, height=800)
        args = build(region="pct:10,-5,50,50", dims=dims)
        assert args[1] == "50%x50+100-40"

    def test_tiny_percent_resize_has_no_exponent(self):
        args = build(size="pct:0.00001")
        assert args[:2] == ["-resize", "0.00001%"]

    def test_percent_crop_without_dimensions(self):
        with pytest.raises(UnrecognizedVariantException):
            build(region="pct:10,25,50,40")

    @pytest.mark.parametrize(
        "size,expected",
        [
            (",30", ["-resize", "x30"]),
            ("20,", ["-resize", "20x"]),
            ("40,50", ["-resize", "40x50!"]),
            ("pct:10", ["-resize", "10%"]),
            ("pct:12.5", ["-resize", "12.5%"]),
            ("!60,70", ["-resize", "60x70"]),
        ],
    )
    def test_resize(self, size, expected):
        assert build(size=size) == expected + [SOURCE, "jpg:-"]

    def test_rotation(self):
        assert build(rotation="90") == ["-rotate", "90", SOURCE, "jpg:-"]

    def test_zero_rotation_omitted(self):
        assert "-rotate" not in build(rotation="0")

    def test_mirror_before_rotation(self):
        assert build(rotation="!45") == ["-flop", "-rotate", "45", SOURCE, "jpg:-"]

    def test_mirror_without_rotation(self):
        assert build(rotation="!0") == ["-flop", SOURCE, "jpg:-"]

    @pytest.mark.parametrize("quality", ["default", "color"])
    def test_colour_qualities_emit_nothing(self, quality):
        assert build(quality=quality) == [SOURCE, "jpg:-"]

    def test_gray(self):
        assert build(quality="gray") == ["-colorspace", "Gray", SOURCE, "jpg:-"]

    def test_bitonal(self):
        assert build(quality="bitonal") == [
            "-colorspace",
            "Gray",
            "-type",
            "Bilevel",
            SOURCE,
            "jpg:-",
        ]

    def test_memory_limit(self):
        assert build(memory_limit="256MiB") == ["-limit", "memory", "256MiB", SOURCE, "jpg:-"]

    def test_clause_order(self):
        """crop, resize, mirror, rotate, colorspace, limit, input, sink"""
        args = build(
            region="10,20,30,40",
            size="!60,70",
            rotation="!90",
            quality="gray",
            memory_limit="1GiB",
        )
        assert args == [
            "-crop",
            "30x40+10+20",
            "+repage",
            "-resize",
            "60x70",
            "-flop",
            "-rotate",
            "90",
            "-colorspace",
            "Gray",
            "-limit",
            "memory",
            "1GiB",
            SOURCE,
            "jpg:-",
        ]

    def test_every_argument_is_a_separate_element(self):
        args = build(region="10,20,30,40", size="40,50", rotation="!22.5", quality="bitonal")
        assert all(isinstance(a, str) for a in args)
        assert all(" " not in a for a in args)

    def test_unrecognized_variant(self):
        """A value smuggled past the parser is refused, not dropped"""
        request = parse_image_request("cat", "full", "full", "0", "default", "jpg")
        smuggled = request.model_copy(update={"size": "40,50"})
        with pytest.raises(UnrecognizedVariantException):
            synthesize(smuggled, SOURCE)
