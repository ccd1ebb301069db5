"""
Show live depth from a ZED camera or SVO recording, and save depth maps or point clouds on keypress.
"""
import sys
import argparse
import traceback
from ._scriptsupport import *
from ._scriptsupport import sdk_version
from ..util import ZedsaveError, PREFIX_DEPTH, PREFIX_POINT_CLOUD
from ..guard import CaptureGuard
from ..io.saver import SaveWorker
from ..io.viewer import DepthViewer

def help_commands():
    print(DepthViewer.INSTRUCTIONS)
    print(" Press 'h' to toggle the help overlay")
    print(DepthViewer.HELP)

def main() -> int:
    SetupStackDumper()
    assert __doc__ is not None
    parser = ArgumentParser(
        description=f"{__doc__.strip()}\nSample from ZED SDK {sdk_version()}",
        epilog=" Example : zedsave depth --resolution=3 --mode=2",
        formatter_class=argparse.RawDescriptionHelpFormatter
        )
    parser.add_argument("--path", action="store", default="./", help=f"Output path, can include a filename prefix. Files are named {PREFIX_DEPTH}N or {PREFIX_POINT_CLOUD}N after it (default: ./)")
    parser.add_argument("--shutdown_timeout", type=float, action="store", default=10.0, metavar="SEC", help="Wait at most SEC seconds for a save in progress when quitting (default: 10)")
    parser.add_argument("--help_commands", action="store_true", help="List interactive commands and exit")
    args = parser.parse_args()
    if args.help_commands:
        help_commands()
        return 0
    beginOfRun(args)
    if not check_arguments(args, parser):
        return 0
    describe_stream(args)
    #
    # Open the camera
    #
    captureFactory, capture_name = zedsave_capture_factory(args)
    try:
        capture = captureFactory()
    except ZedsaveError as e:
        print(f"{sys.argv[0]}: {e}")
        return 1
    if args.verbose: print(f"capture: opened {capture_name}", flush=True)
    guard = CaptureGuard(capture, verbose=args.verbose)
    saver = SaveWorker(guard, verbose=args.verbose)
    viewer = DepthViewer(capture, saver, path=args.path, verbose=args.verbose)
    #
    # Run everything
    #
    status = 0
    try:
        saver.start()
        viewer.run()
    except KeyboardInterrupt:
        print("\nQuitting...")
        status = 1
    except Exception:
        traceback.print_exc()
        status = 1
    #
    # Pending saves are finished before the camera is released
    #
    saver.stop(args.shutdown_timeout)
    guard.release(args.shutdown_timeout)
    saver.statistics()
    endOfRun(args)
    return status

if __name__ == '__main__':
    sys.exit(main())
