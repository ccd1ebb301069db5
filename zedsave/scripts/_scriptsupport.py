import sys
import os
import signal
import argparse
import traceback
from typing import NoReturn, Optional, Tuple

from ..util import ZedsaveError, zedsave_get_version, RESOLUTIONS, RESOLUTION_SIZES, DEPTH_MODES, DEFAULT_DEPTH_CLAMP
from ..abstract import zedsave_capture_factory_abstract
from ..synthetic import zedsave_synthetic

try:
    from .. import zed
except ImportError:
    zed = None

__all__ = [
    "SetupStackDumper",
    "ArgumentParser",
    "zedsave_capture_factory",
    "check_arguments",
    "describe_stream",
    "beginOfRun",
    "endOfRun",
]

def _dump_app_stacks(*args) -> None:
    """Print stack traces for all threads."""
    print(f"{sys.argv[0]}: QUIT received, dumping all stacks, {len(sys._current_frames())} threads:", file=sys.stderr)
    for threadId, stack in list(sys._current_frames().items()):
        print("\nThreadID:", threadId, file=sys.stderr)
        traceback.print_stack(stack, file=sys.stderr)
        print(file=sys.stderr)

def SetupStackDumper() -> None:
    """Install signal handler so `kill --QUIT` will dump all thread stacks, for debugging."""
    if hasattr(signal, 'SIGQUIT'):
        signal.signal(signal.SIGQUIT, _dump_app_stacks)

def sdk_version() -> str:
    if zed is None:
        return "(not installed)"
    return zed.zed_sdk_version()

class _UsageArgumentParser(argparse.ArgumentParser):
    """Argument parser that treats bad arguments as a user error: print usage and exit with status 0."""

    def error(self, message : str) -> NoReturn:
        print(f"{self.prog}: {message}", file=sys.stderr)
        self.print_help()
        self.exit(0)

def ArgumentParser(*args, **kwargs) -> argparse.ArgumentParser:
    parser = _UsageArgumentParser(*args, **kwargs)
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--verbose", action="count", default=0, help="Print information about each request while it is processed. Double for even more verbosity.")
    parser.add_argument("--pausefordebug", action="store_true", help="Pause at begin and end of run (to allow attaching debugger or profiler)")

    input_selection_args = parser.add_argument_group("input source selection").add_mutually_exclusive_group()
    input_selection_args.add_argument("--filename", action="store", metavar="SVO", help="SVO recording to play back (default: live ZED camera)")
    input_selection_args.add_argument("--synthetic", action="store_true", help="Use synthetic depth source in stead of a camera")

    input_args = parser.add_argument_group("input arguments")
    input_args.add_argument("--resolution", type=int, action="store", default=2, metavar="N", help="Camera resolution: 0: HD2K, 1: HD1080, 2: HD720, 3: VGA (default: 2)")
    input_args.add_argument("--mode", type=int, action="store", default=1, metavar="N", help="Depth mode: 1: PERFORMANCE, 2: MEDIUM, 3: QUALITY (default: 1)")
    input_args.add_argument("--device", type=int, action="store", default=-1, metavar="N", help="Compute device to use, -1 for automatic (default: -1)")
    input_args.add_argument("--depth_clamp", type=float, action="store", default=DEFAULT_DEPTH_CLAMP, metavar="MM", help=f"Maximum depth in millimeters (default: {DEFAULT_DEPTH_CLAMP})")
    input_args.add_argument("--nframes", type=int, action="store", default=0, metavar="N", help="With --synthetic behave like a recording of N frames")
    input_args.add_argument("--fps", type=int, action="store", default=0, help="With --synthetic limit the frame rate to FPS")
    return parser

def check_arguments(args : argparse.Namespace, parser : argparse.ArgumentParser) -> bool:
    """Validate enumerated arguments. Prints a message and usage and returns False if they are not acceptable."""
    if not args.filename and not 0 <= args.resolution < len(RESOLUTIONS):
        print(f"resolution {args.resolution} is not available.")
        parser.print_help()
        return False
    if args.mode not in DEPTH_MODES:
        print(f"mode {args.mode} is not available.")
        parser.print_help()
        return False
    if args.depth_clamp <= 0:
        print(f"depth_clamp {args.depth_clamp} is not available.")
        parser.print_help()
        return False
    return True

def describe_stream(args : argparse.Namespace) -> None:
    """Print what will be captured, before opening it"""
    if args.synthetic:
        print("Stream\t\t> SYNTHETIC")
    elif args.filename:
        print(f"Stream\t\t> SVO :{args.filename}")
    else:
        print("Stream\t\t> LIVE")
    if not args.filename:
        print(f"Resolution\t> {RESOLUTIONS[args.resolution]}")
    print(f"Mode\t\t> {DEPTH_MODES[args.mode]}", flush=True)

def zedsave_capture_factory(args : argparse.Namespace) -> Tuple[zedsave_capture_factory_abstract, Optional[str]]:
    """Create a capture factory based on command line arguments.
    Returns the factory and the name of the capture type.
    The factory raises ZedsaveError if the capturer cannot be opened.
    """
    source : zedsave_capture_factory_abstract
    if args.synthetic:
        width, height = RESOLUTION_SIZES[RESOLUTIONS[args.resolution]]
        source = lambda : zedsave_synthetic(width, height, nframes=args.nframes, fps=args.fps, depth_clamp=args.depth_clamp)
        return source, 'synthetic'
    if zed is None:
        def _no_zed():
            raise ZedsaveError("No support for ZED camera on this platform (pyzed not installed)")
        return _no_zed, None
    if args.filename:
        source = lambda : zed.zedsave_zed(filename=args.filename, mode=args.mode, device=args.device, depth_clamp=args.depth_clamp, verbose=args.verbose > 1)
        return source, 'svo'
    source = lambda : zed.zedsave_zed(resolution=args.resolution, mode=args.mode, device=args.device, depth_clamp=args.depth_clamp, verbose=args.verbose > 1)
    return source, 'zed'

def beginOfRun(args : argparse.Namespace) -> None:
    """Handle --version and optionally pause execution"""
    if args.version:
        print(zedsave_get_version())
        sys.exit(0)
    if args.pausefordebug:
        answer=None
        while answer != 'Y':
            print(f"{sys.argv[0]}: starting, pid={os.getpid()}. Press Y to continue -", flush=True)
            answer = sys.stdin.readline()
            answer = answer.strip()
        print(f"{sys.argv[0]}: started.")

def endOfRun(args : argparse.Namespace) -> None:
    """Optionally pause execution"""
    if args.pausefordebug:
        answer=None
        while answer != 'Y':
            print(f"{sys.argv[0]}: stopping, pid={os.getpid()}. Press Y to continue -", flush=True)
            answer = sys.stdin.readline()
            answer = answer.strip()
        print(f"{sys.argv[0]}: stopped.")
