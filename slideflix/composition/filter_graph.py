"""
Filter graph model and builder for the two-slide crossfade.

The graph is a small typed structure (inputs, filter chains, labels) with a
serializer to ffmpeg's ``-filter_complex`` syntax. Building is pure: nothing
here touches the filesystem or spawns a process.

Graph shape:

    [0:v] scale,pad,setsar,fps,format [v0] ┐
                                           ├─ xfade [xf] ─┬──────────────── final (no logo)
    [1:v] scale,pad,setsar,fps,format [v1] ┘              │
    [2:v] scale [logo] ─────────────────────────── overlay [out] ─ final (logo)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .exceptions import ValidationError
from .models import (
    SLIDE_COUNT,
    CanvasSize,
    CompositionOptions,
    Corner,
    MediaAsset,
)

SLIDE_LABELS = ("v0", "v1")
TRANSITION_LABEL = "xf"
LOGO_LABEL = "logo"
OVERLAY_LABEL = "out"

TRANSITION_STYLES = ("fade", "dissolve")


def format_number(value: Union[int, float]) -> str:
    """Render a number without float noise: 3.5 -> '3.5', 4.0 -> '4'."""
    text = f"{float(value):.6f}".rstrip("0").rstrip(".")
    return text or "0"


# --------------------------- Filter nodes ---------------------------

@dataclass(frozen=True)
class Filter:
    """Base filter node. Subclasses define ``name`` and ``params``."""

    name = ""

    def params(self) -> List[Tuple[Optional[str], str]]:
        return []

    def render(self) -> str:
        rendered = [value if key is None else f"{key}={value}" for key, value in self.params()]
        if not rendered:
            return self.name
        return f"{self.name}=" + ":".join(rendered)


@dataclass(frozen=True)
class Scale(Filter):
    width: Union[int, str]
    height: Union[int, str]
    force_original_aspect_ratio: Optional[str] = None

    name = "scale"

    def params(self):
        params = [(None, str(self.width)), (None, str(self.height))]
        if self.force_original_aspect_ratio:
            params.append(("force_original_aspect_ratio", self.force_original_aspect_ratio))
        return params


@dataclass(frozen=True)
class Pad(Filter):
    width: int
    height: int
    x: str = "(ow-iw)/2"
    y: str = "(oh-ih)/2"
    color: str = "black"

    name = "pad"

    def params(self):
        return [
            (None, str(self.width)),
            (None, str(self.height)),
            (None, self.x),
            (None, self.y),
            ("color", self.color),
        ]


@dataclass(frozen=True)
class SetSar(Filter):
    ratio: str = "1"

    name = "setsar"

    def params(self):
        return [(None, self.ratio)]


@dataclass(frozen=True)
class Fps(Filter):
    fps: int

    name = "fps"

    def params(self):
        return [(None, str(self.fps))]


@dataclass(frozen=True)
class Format(Filter):
    pix_fmt: str = "yuv420p"

    name = "format"

    def params(self):
        return [(None, self.pix_fmt)]


@dataclass(frozen=True)
class Transition(Filter):
    """Crossfade between two streams (ffmpeg ``xfade``)."""

    duration: float
    offset: float
    transition: str = "fade"

    name = "xfade"

    def params(self):
        return [
            ("transition", self.transition),
            ("duration", format_number(self.duration)),
            ("offset", format_number(self.offset)),
        ]


@dataclass(frozen=True)
class Overlay(Filter):
    x: str
    y: str

    name = "overlay"

    def params(self):
        return [(None, self.x), (None, self.y)]

    @classmethod
    def anchored(cls, corner: Corner, margin: int) -> "Overlay":
        m = int(margin)
        left, top = str(m), str(m)
        right, bottom = f"W-w-{m}", f"H-h-{m}"
        positions = {
            Corner.TOP_LEFT: (left, top),
            Corner.TOP_RIGHT: (right, top),
            Corner.BOTTOM_LEFT: (left, bottom),
            Corner.BOTTOM_RIGHT: (right, bottom),
        }
        x, y = positions[corner]
        return cls(x=x, y=y)


# --------------------------- Graph structure ---------------------------

@dataclass(frozen=True)
class FilterChain:
    """Linear run of filters from one or more labelled pads to one output label."""

    inputs: Tuple[str, ...]
    filters: Tuple[Filter, ...]
    output: str

    def render(self) -> str:
        sources = "".join(f"[{label}]" for label in self.inputs)
        body = ",".join(f.render() for f in self.filters)
        return f"{sources}{body}[{self.output}]"


@dataclass(frozen=True)
class InputSpec:
    """One encoder input: file path plus the options placed before ``-i``."""

    path: Path
    role: str
    options: Tuple[str, ...] = ()

    def args(self) -> List[str]:
        return [*self.options, "-i", str(self.path)]


@dataclass(frozen=True)
class FilterGraph:
    inputs: Tuple[InputSpec, ...]
    chains: Tuple[FilterChain, ...]
    output_label: str
    hold_duration: float
    transition_duration: float
    offset: float
    total_duration: float
    canvas: CanvasSize
    _producers: Dict[str, FilterChain] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        producers: Dict[str, FilterChain] = {}
        for chain in self.chains:
            for label in chain.inputs:
                if label in producers:
                    continue
                if not self._is_input_pad(label):
                    raise ValueError(f"Filter chain reads undefined label [{label}]")
            if chain.output in producers:
                raise ValueError(f"Label [{chain.output}] is produced twice")
            producers[chain.output] = chain
        if self.output_label not in producers:
            raise ValueError(f"Final label [{self.output_label}] is never produced")
        object.__setattr__(self, "_producers", producers)

    def _is_input_pad(self, label: str) -> bool:
        index, _, stream = label.partition(":")
        return stream == "v" and index.isdigit() and int(index) < len(self.inputs)

    @property
    def has_overlay(self) -> bool:
        return any(isinstance(f, Overlay) for f in self.filters())

    @property
    def output_chain(self) -> FilterChain:
        return self._producers[self.output_label]

    def producer(self, label: str) -> Optional[FilterChain]:
        return self._producers.get(label)

    def filters(self) -> Iterator[Filter]:
        for chain in self.chains:
            yield from chain.filters

    def upstream(self, label: Optional[str] = None) -> List[FilterChain]:
        """Chains the given label (default: the final output) depends on, nearest first."""
        seen: List[FilterChain] = []
        pending = [label or self.output_label]
        while pending:
            chain = self._producers.get(pending.pop(0))
            if chain is None or chain in seen:
                continue
            seen.append(chain)
            pending.extend(chain.inputs)
        return seen

    def serialize(self) -> str:
        """ffmpeg ``-filter_complex`` expression."""
        return ";".join(chain.render() for chain in self.chains)

    def input_args(self) -> List[str]:
        args: List[str] = []
        for spec in self.inputs:
            args.extend(spec.args())
        return args

    def input_paths(self) -> List[Path]:
        return [spec.path for spec in self.inputs]


# --------------------------- Builder ---------------------------

class FilterGraphBuilder:
    """Builds the crossfade graph from request parameters and fixed style options."""

    def __init__(
        self,
        frame_rate: int = 25,
        transition_style: str = "fade",
        logo_width: int = 120,
        logo_margin: int = 30,
        logo_corner: Union[Corner, str] = Corner.BOTTOM_RIGHT,
        pixel_format: str = "yuv420p",
    ):
        if transition_style not in TRANSITION_STYLES:
            raise ValidationError(
                f"Unsupported transition '{transition_style}'. Expected one of: {', '.join(TRANSITION_STYLES)}"
            )
        if frame_rate <= 0:
            raise ValidationError(f"Frame rate must be positive, got {frame_rate}")
        if logo_width <= 0:
            raise ValidationError(f"Logo width must be positive, got {logo_width}")
        self.frame_rate = int(frame_rate)
        self.transition_style = transition_style
        self.logo_width = int(logo_width)
        self.logo_margin = max(0, int(logo_margin))
        self.logo_corner = Corner.parse(logo_corner)
        self.pixel_format = pixel_format

    @classmethod
    def from_options(cls, options: CompositionOptions) -> "FilterGraphBuilder":
        return cls(
            frame_rate=options.frame_rate,
            transition_style=options.transition_style,
            logo_width=options.logo_width,
            logo_margin=options.logo_margin,
            logo_corner=options.logo_corner,
            pixel_format=options.encode.pixel_format,
        )

    def build(
        self,
        slide_assets: Sequence[MediaAsset],
        logo_asset: Optional[MediaAsset],
        hold_duration: float,
        transition_duration: float,
        canvas_size: Union[CanvasSize, Tuple[int, int]],
    ) -> FilterGraph:
        """
        Compute the filter graph.

        Raises:
            ValidationError: Wrong slide count, non-positive durations,
                transition not strictly shorter than the hold, bad canvas
        """
        canvas = canvas_size if isinstance(canvas_size, CanvasSize) else CanvasSize(*canvas_size)

        if len(slide_assets) != SLIDE_COUNT:
            raise ValidationError(
                f"Exactly {SLIDE_COUNT} slides are required, got {len(slide_assets)}",
                details={"field": "slideUrls"},
            )
        for name, value in (("Hold", hold_duration), ("Transition", transition_duration)):
            if not math.isfinite(value) or value <= 0:
                raise ValidationError(f"{name} duration must be a positive finite number, got {value}")

        offset = hold_duration - transition_duration
        if offset <= 0:
            raise ValidationError(
                f"Transition duration ({transition_duration}s) must be shorter than "
                f"the hold duration ({hold_duration}s)",
                details={"hold_duration": hold_duration, "transition_duration": transition_duration},
            )
        total_duration = hold_duration * 2 - transition_duration

        still_options = (
            "-loop", "1",
            "-framerate", str(self.frame_rate),
            "-t", format_number(hold_duration),
        )
        inputs = [InputSpec(asset.path, asset.role, still_options) for asset in slide_assets]

        chains = [
            FilterChain(
                inputs=(f"{index}:v",),
                filters=(
                    Scale(canvas.width, canvas.height, force_original_aspect_ratio="decrease"),
                    Pad(canvas.width, canvas.height),
                    SetSar("1"),
                    Fps(self.frame_rate),
                    Format(self.pixel_format),
                ),
                output=SLIDE_LABELS[index],
            )
            for index in range(SLIDE_COUNT)
        ]
        chains.append(
            FilterChain(
                inputs=SLIDE_LABELS,
                filters=(Transition(transition_duration, offset, self.transition_style),),
                output=TRANSITION_LABEL,
            )
        )
        output_label = TRANSITION_LABEL

        if logo_asset is not None:
            logo_index = len(inputs)
            inputs.append(InputSpec(logo_asset.path, logo_asset.role))
            chains.append(
                FilterChain(
                    inputs=(f"{logo_index}:v",),
                    filters=(Scale(self.logo_width, -1),),
                    output=LOGO_LABEL,
                )
            )
            chains.append(
                FilterChain(
                    inputs=(TRANSITION_LABEL, LOGO_LABEL),
                    filters=(Overlay.anchored(self.logo_corner, self.logo_margin),),
                    output=OVERLAY_LABEL,
                )
            )
            output_label = OVERLAY_LABEL

        return FilterGraph(
            inputs=tuple(inputs),
            chains=tuple(chains),
            output_label=output_label,
            hold_duration=hold_duration,
            transition_duration=transition_duration,
            offset=offset,
            total_duration=total_duration,
            canvas=canvas,
        )


def build_filter_graph(
    slide_assets: Sequence[MediaAsset],
    logo_asset: Optional[MediaAsset],
    hold_duration: float,
    transition_duration: float,
    canvas_size: Union[CanvasSize, Tuple[int, int]],
    **style,
) -> FilterGraph:
    """Functional form of :meth:`FilterGraphBuilder.build`."""
    return FilterGraphBuilder(**style).build(
        slide_assets, logo_asset, hold_duration, transition_duration, canvas_size
    )
