"""numc CLI: compile .nc files to native executables."""

from __future__ import annotations

import sys

from .backend import CodegenError, emit_c
from .frontend import ParseError, TokenizeError, parse
from .options import PHASES, Options
from .serialize import to_json
from .toolchain import ToolchainError, build


USAGE: str = """\
numc [OPTIONS] FILE

Compile a numc program to a native executable.

Options:
  -o, --output FILE     Name of the executable (default: input file stem)
  -i, --intermediates   Keep the generated C source as <stem>.c
  --cc CC               C compiler to invoke (default: gcc)
  --stop-at PHASE       Stop after phase and print its result: parse, codegen
  -h, --help            Show this help message
"""


def parse_args(args: list[str]) -> tuple[Options | None, int]:
    """Parse command-line arguments. Returns (options, exit_code); options is None to stop."""
    input_file = ""
    output: str | None = None
    keep_intermediate = False
    cc = "gcc"
    stop_at: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return (None, 0)
        elif arg == "-o" or arg == "--output" or arg == "--cc" or arg == "--stop-at":
            if i + 1 >= len(args):
                print("numc: " + arg + " requires an argument", file=sys.stderr)
                return (None, 2)
            value = args[i + 1]
            if arg == "--cc":
                cc = value
            elif arg == "--stop-at":
                stop_at = value
            else:
                output = value
            i += 2
        elif arg == "-i" or arg == "--intermediates":
            keep_intermediate = True
            i += 1
        elif arg.startswith("-"):
            print("numc: unknown flag '" + arg + "'", file=sys.stderr)
            return (None, 2)
        elif input_file == "":
            input_file = arg
            i += 1
        else:
            print("numc: unexpected argument '" + arg + "'", file=sys.stderr)
            return (None, 2)
    if input_file == "":
        print("numc: missing file argument", file=sys.stderr)
        return (None, 2)
    if stop_at is not None and stop_at not in PHASES:
        print("numc: unknown phase '" + stop_at + "'", file=sys.stderr)
        return (None, 2)
    return (Options(input_file, output, keep_intermediate, cc, stop_at), 0)


def read_source(filepath: str) -> tuple[str, int]:
    """Read source text. Returns (source, exit_code) where exit_code 0 means OK."""
    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("numc: " + filepath + ": No such file or directory", file=sys.stderr)
        return ("", 1)
    except OSError as e:
        print("numc: " + filepath + ": " + str(e), file=sys.stderr)
        return ("", 1)
    try:
        return (raw.decode("utf-8"), 0)
    except ValueError:
        print("numc: " + filepath + ": invalid utf-8", file=sys.stderr)
        return ("", 1)


def run(opts: Options) -> int:
    """Run the pipeline described by `opts`. Returns the process exit code."""
    source, err = read_source(opts.input_file)
    if err != 0:
        return err

    try:
        program = parse(source)
    except (TokenizeError, ParseError) as e:
        print("numc: parse error: " + str(e), file=sys.stderr)
        return 1
    if opts.stop_at == "parse":
        print(to_json(program))
        return 0

    try:
        c_source = emit_c(program)
    except CodegenError as e:
        print("numc: error: " + str(e), file=sys.stderr)
        return 1
    if opts.stop_at == "codegen":
        sys.stdout.write(c_source)
        return 0

    if opts.keep_intermediate:
        try:
            with open(opts.intermediate_name(), "w") as f:
                f.write(c_source)
        except OSError:
            print("numc: cannot write '" + opts.intermediate_name() + "'", file=sys.stderr)
            return 1

    try:
        result = build(c_source, opts.output_name(), opts.cc)
    except ToolchainError as e:
        print("numc: error: " + str(e), file=sys.stderr)
        return 1
    if not result.ok:
        print("numc: program compilation failed", file=sys.stderr)
        sys.stderr.write(result.stderr)
        return 1
    sys.stdout.write(result.stdout)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    opts, code = parse_args(args)
    if opts is None:
        return code
    return run(opts)


if __name__ == "__main__":
    sys.exit(main())
