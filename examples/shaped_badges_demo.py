from __future__ import annotations

from pathlib import Path

from shaped_image import (
    FixedScaleProvider,
    Gradient,
    GradientOptions,
    RasterSurface,
    RectCorner,
    ShapedImageSynthesizer,
)


def main() -> None:
    out_dir = Path(__file__).resolve().parent / "out"
    out_dir.mkdir(parents=True, exist_ok=True)
    synth = ShapedImageSynthesizer(surface=RasterSurface(), scale_provider=FixedScaleProvider(2.0))

    pill = synth.synthesize_solid(
        "#2B3442",
        (160.0, 48.0),
        {RectCorner.ALL_CORNERS: 24.0},
        border_color="#F8FAFC",
        border_width=3.0,
    )
    card = synth.synthesize_gradient(
        Gradient.from_colors(["#334155", "#0F172A"]),
        (0.0, 0.0),
        (0.0, 120.0),
        GradientOptions(draws_before_start=True, draws_after_end=True),
        (200.0, 120.0),
        {RectCorner.TOP_LEFT | RectCorner.TOP_RIGHT: 16.0, RectCorner.BOTTOM_RIGHT: 4.0},
        border_color="#9CA3AF",
        border_width=2.0,
    )

    for name, image in (("pill", pill), ("card", card)):
        png_path = out_dir / f"{name}.png"
        svg_path = out_dir / f"{name}_outline.txt"
        png_path.write_bytes(image.to_png_bytes())
        svg_path.write_text(image.outline.to_svg_path() + "\n", encoding="utf-8")
        print(f"wrote {png_path} ({image.pixel_width}x{image.pixel_height} px)")
        print(f"wrote {svg_path}")


if __name__ == "__main__":
    main()
