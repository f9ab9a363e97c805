"""CLI entrypoints for projsnap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .git.context import GitWorkflowError, MergeConflictError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .reconstructor import ManifestValidationError

_COMMANDS = ("snapshot", "reconstruct", "init")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write detailed logs to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projsnap",
        description="Analyze project structures into JSON snapshots and reconstruct them.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Capture a project directory as a JSON manifest (default command).",
    )
    _add_verbose_option(snapshot_parser, suppress_default=True)
    _add_log_file_option(snapshot_parser, suppress_default=True)
    snapshot_parser.add_argument(
        "-d",
        "--dir",
        default=".",
        help="Project directory to analyze (defaults to current directory).",
    )
    snapshot_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file path (defaults to ./code.json or the configured output).",
    )
    snapshot_parser.add_argument("-n", "--name", default=None, help="Project name.")
    snapshot_parser.add_argument(
        "-t",
        "--version-tag",
        default=None,
        help="Version tag for the analysis (defaults to 1.0.0).",
    )
    snapshot_parser.add_argument(
        "-g",
        "--git",
        action="store_true",
        help="Snapshot the tree as it would look after merging the current branch into trunk.",
    )
    snapshot_parser.add_argument(
        "--target-branch",
        default=None,
        help="Trunk branch for --git snapshots (defaults to master or the configured branch).",
    )

    reconstruct_parser = subparsers.add_parser(
        "reconstruct",
        aliases=["init"],
        help="Initialize a project from an analysis JSON manifest.",
    )
    _add_verbose_option(reconstruct_parser, suppress_default=True)
    _add_log_file_option(reconstruct_parser, suppress_default=True)
    reconstruct_parser.add_argument(
        "-i",
        "--input",
        required=True,
        help="Input JSON manifest path.",
    )
    reconstruct_parser.add_argument(
        "-d",
        "--dir",
        default=".",
        help="Output directory (defaults to current directory).",
    )

    return parser


def _with_default_command(argv: list[str]) -> list[str]:
    """Insert the implicit ``snapshot`` command after any global options."""
    index = 0
    while index < len(argv):
        arg = argv[index]
        if arg in _COMMANDS or arg in ("-h", "--help", "--version"):
            return argv
        if arg in ("-v", "--verbose") or arg.startswith("--log-file="):
            index += 1
        elif arg == "--log-file":
            index += 2
        else:
            break
    return [*argv[:index], "snapshot", *argv[index:]]


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projsnap commands."""
    parser = _build_parser()
    args = parser.parse_args(_with_default_command(list(sys.argv[1:] if argv is None else argv)))

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    if args.command == "snapshot":
        try:
            outcome = orchestrator.run_snapshot(
                args.dir,
                output=args.output,
                name=args.name,
                version_tag=args.version_tag,
                use_git=bool(args.git),
                target_branch=args.target_branch,
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except MergeConflictError as exc:
            parser.exit(1, f"projsnap snapshot failed: {exc}\n")
        except GitWorkflowError as exc:
            parser.exit(1, f"projsnap snapshot failed: {exc}\nRun with --verbose for more details.\n")
        except (OSError, UnicodeDecodeError) as exc:
            parser.exit(1, f"projsnap snapshot failed: {exc}\n")
        print(f"Generated code analysis at: {_relativize(outcome.path)}")
    elif args.command in ("reconstruct", "init"):
        try:
            result = orchestrator.run_reconstruct(args.input, args.dir)
        except FileNotFoundError as exc:
            parser.exit(1, f"Error: {exc}\n")
        except ManifestValidationError as exc:
            parser.exit(1, f"Error: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"Error during project reconstruction: {exc}\n")
        print("Project reconstruction completed!")
        print(f"Framework detected: {result.framework}")
        print(f"Total files created: {result.total_files}")
        print("Next steps:")
        print(f"1. cd {_relativize(result.target_dir)}")
        print("2. npm install")
        if result.framework != "unknown":
            print(f"3. Follow {result.framework} setup instructions")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
