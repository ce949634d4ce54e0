import math
import os
import sys
import time
from argparse import ArgumentParser
from dataclasses import dataclass

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])

if not _cli_verbose:
    os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

from fractal import AnimationState, InvalidConfig, InvalidZoom, Mode, compute_zoom_factors
from fractal import runtime
from fractal.runtime import log, select_device


@dataclass
class RunConfig:
    size: int
    mode: str
    zoom: float
    shift_x: float
    shift_y: float
    frames: int
    zoom_factor: float
    final_zoom: float | None
    easing: str
    preview: bool


def build_parser():
    parser = ArgumentParser(description='Drive the fractal engine the way an animation loop would.')

    parser.add_argument('--size', type=int,
                        dest='size', help='width and height of the square canvas in pixels',
                        metavar='SIZE', default=512)

    parser.add_argument('--mode', type=str,
                        dest='mode', help='fractal family to render: "mandelbrot" or "newton"',
                        metavar='MODE', default='mandelbrot')

    parser.add_argument('--zoom', type=float,
                        dest='zoom', help='magnification of the first frame',
                        metavar='ZOOM', default=1.0)

    parser.add_argument('--shift-x', type=float,
                        dest='shift_x', help='real part of the point the view is centred on',
                        metavar='SHIFT_X', default=0.0)

    parser.add_argument('--shift-y', type=float,
                        dest='shift_y', help='imaginary part of the point the view is centred on',
                        metavar='SHIFT_Y', default=0.0)

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to render',
                        metavar='FRAMES', default=60)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='the factor by which to multiply the zoom each frame. Choose > 1 to zoom in, < 1 to zoom out',
                        metavar='ZOOM_FACTOR', default=1.05)

    parser.add_argument('--final-zoom', type=float, default=None,
                        help='Overall magnification reached by the last frame (e.g., 1e4). If set, overrides --zoom-factor.')

    parser.add_argument('--easing', type=str, default='ease',
                        help='Temporal curve used for variable zoom: "linear" or "ease" for smooth ease-in-out.')

    parser.add_argument('--preview', action='store_true',
                        help='Show the last frame in a matplotlib window.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_run_config(opt, parser: ArgumentParser) -> RunConfig:
    if opt.size <= 0:
        parser.error("--size must be a positive integer.")

    mode = opt.mode.strip().lower()
    valid_modes = {m.value for m in Mode}
    if mode not in valid_modes:
        parser.error(f"Unknown mode '{opt.mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")

    if not (opt.zoom > 0 and math.isfinite(opt.zoom)):
        parser.error("--zoom must be a finite positive number.")

    if opt.frames < 0:
        parser.error("--frames cannot be negative.")

    if opt.final_zoom is None and not opt.zoom_factor > 0:
        parser.error("--zoom-factor must be positive.")

    if opt.final_zoom is not None and not opt.final_zoom > 0:
        parser.error("--final-zoom must be positive.")

    easing = opt.easing.lower()
    if easing not in {"linear", "ease"}:
        parser.error(f"Unknown easing '{opt.easing}'. Valid choices: ease, linear.")

    return RunConfig(
        size=opt.size,
        mode=mode,
        zoom=opt.zoom,
        shift_x=opt.shift_x,
        shift_y=opt.shift_y,
        frames=opt.frames,
        zoom_factor=opt.zoom_factor,
        final_zoom=opt.final_zoom,
        easing=easing,
        preview=bool(opt.preview),
    )


def show_frame(state: AnimationState) -> None:
    import matplotlib.pyplot as plt

    size = state.get_size()
    my_dpi = 100
    fig, ax = plt.subplots(figsize=(size / my_dpi, size / my_dpi), dpi=my_dpi)
    ax.imshow(state.to_array(), origin='upper', interpolation='nearest')
    ax.axis('off')
    plt.subplots_adjust(0, 0, 1, 1, 0, 0)
    plt.show()
    plt.close(fig)


def run(config: RunConfig, device: str) -> list[float]:
    """Render ``config.frames`` frames and return the time spent on each."""

    per_frame_factors = compute_zoom_factors(
        config.frames,
        config.zoom_factor,
        final_zoom=config.final_zoom,
        easing=config.easing,
    )

    durations: list[float] = []
    with AnimationState.new(
        config.size,
        config.mode,
        zoom=config.zoom,
        shift=(config.shift_x, config.shift_y),
        device=device,
    ) as state:
        for i in range(config.frames):
            print("frame {0} out of {1}".format(i, config.frames), end='\r')
            start_time = time.perf_counter()
            try:
                state.set_zoom(state.get_zoom() * per_frame_factors[i])
            except InvalidZoom as exc:
                print(f"\nStopping at frame {i}: {exc}")
                break
            state.get_data()
            durations.append(time.perf_counter() - start_time)
            log("frame {0}: zoom {1:.6g}, {2:.4f}s".format(i, state.get_zoom(), durations[-1]))

        if config.preview:
            show_frame(state)

    return durations


def main():
    parser = build_parser()
    opt = parser.parse_args()

    config = resolve_run_config(opt, parser)
    runtime.set_verbose(opt.verbose)

    device = select_device()
    try:
        durations = run(config, device)
    except InvalidConfig as exc:
        parser.error(str(exc))

    print("-" * 40)
    if durations:
        total_time = sum(durations)
        print(f"Rendered {len(durations)} {config.mode} frames of {config.size}x{config.size} on {device}")
        print(f"Total Render Time: {total_time:.2f}s")
        print(f"Average Time per Frame: {total_time / len(durations):.4f}s")
    else:
        print("No frames rendered.")


if __name__ == '__main__':
    main()
