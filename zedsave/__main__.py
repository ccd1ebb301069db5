import sys
from typing import List
import pkgutil
from . import scripts, zedsave_get_version

def find_scripts() -> List[str]:
    scripts_list = []
    for _, name, _ in pkgutil.iter_modules(scripts.__path__):
        if not name.startswith('zedsave_'):
            continue
        scripts_list.append(name[8:])
    return scripts_list

def get_docstring(name : str) -> str:
    mod = __import__(f'zedsave.scripts.zedsave_{name}', fromlist=[''])
    if mod.__doc__ is None:
        return ""
    return mod.__doc__.strip().split('\n')[0]

def help():
    print(f"{sys.argv[0]} - save depth maps and point clouds from a ZED stereo camera", file=sys.stderr)
    print("\nCommands:", file=sys.stderr)
    for s in find_scripts():
        doc = get_docstring(s)
        if doc:
            print(f"  {s:20} - {doc}", file=sys.stderr)
        else:
            print(f"  {s:20}", file=sys.stderr)
    print("\nSpecial commands:", file=sys.stderr)
    print("  help                 - show this help message", file=sys.stderr)
    print("  version              - show zedsave version", file=sys.stderr)
    print("\nUse 'zedsave <command> -h' for help on a specific command.", file=sys.stderr)

def run_version() -> int:
    print(zedsave_get_version())
    return 0

def main():
    if len(sys.argv) < 2 or sys.argv[1] in ('-h', '--help', 'help'):
        help()
        sys.exit(1)
    command = sys.argv[1]
    if command in ('-v', '--version', 'version'):
        sys.exit(run_version())
    if command not in find_scripts():
        print(f"Unknown command '{command}'. Use -h for help.")
        sys.exit(1)
    mod = __import__(f'zedsave.scripts.zedsave_{command}', fromlist=[''])
    sys.argv[0] = sys.argv[0] + ' ' + command
    del sys.argv[1]
    sys.exit(mod.main())

if __name__ == '__main__':
    main()
