"""create-rn-app command-line interface.

Asks for a project name, a backend and whether to add a paywall, then:

1. acquires the base template into ``./<name>``,
2. composes the selected integrations into it,
3. installs dependencies (failure only warns).

Usage::

    create-rn-app
    create-rn-app my-app --backend supabase --paywall
    python -m create_rn_app my-app --yes --skip-install
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.markup import escape
from rich.prompt import Confirm, Prompt

from create_rn_app import __version__
from create_rn_app.config import Config
from create_rn_app.errors import InvalidProjectName, ScaffoldError, TemplateAcquisitionFailure
from create_rn_app.scaffolder import Backend, Composer, CompositionResult, FeatureSelection
from create_rn_app.scaffolder.identity import validate_project_name
from create_rn_app.scaffolder.installer import install_dependencies
from create_rn_app.scaffolder.template_source import acquire_template
from create_rn_app.utils import (
    console,
    create_progress,
    print_error,
    print_intro,
    print_next_steps,
    print_success,
    print_summary_table,
    print_warning,
)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def ask_project_name(parent_dir: Path) -> str:
    """Prompt until the user enters a valid, unused project name."""
    while True:
        name = Prompt.ask("What is your project name?", default="my-app", console=console)
        try:
            return validate_project_name(name.strip(), parent_dir)
        except InvalidProjectName as exc:
            print_error(exc.reason)


def ask_backend() -> Backend:
    choice = Prompt.ask(
        "Which backend? (Auth + data)",
        choices=[b.value for b in Backend],
        default=Backend.NONE.value,
        console=console,
    )
    return Backend(choice)


def ask_paywall() -> bool:
    return Confirm.ask(
        "Add Superwall? (Paywalls + In-App Purchases)", default=False, console=console
    )


def collect_answers(args: argparse.Namespace, config: Config) -> tuple[str, FeatureSelection]:
    """Resolve the project name and selection from flags, prompting for the rest.

    Raises:
        InvalidProjectName: If a name given on the command line is invalid.
    """
    if args.name is not None:
        name = validate_project_name(args.name, config.output_dir)
    else:
        name = ask_project_name(config.output_dir)

    if args.backend is not None:
        backend = Backend(args.backend)
    elif args.yes:
        backend = Backend.NONE
    else:
        backend = ask_backend()

    if args.paywall is not None:
        paywall = args.paywall
    elif args.yes:
        paywall = False
    else:
        paywall = ask_paywall()

    return name, FeatureSelection(backend=backend, paywall=paywall)


# ---------------------------------------------------------------------------
# Scaffolding flow
# ---------------------------------------------------------------------------


async def scaffold(
    config: Config,
    project_name: str,
    selection: FeatureSelection,
    install: bool = True,
) -> CompositionResult:
    """Acquire, compose and install a new project.

    Raises:
        TemplateAcquisitionFailure: Nothing was created.
        ScaffoldError: Composition failed part-way; the directory is left on disk.
    """
    project_path = config.project_path(project_name)

    with create_progress() as progress:
        progress.add_task("Cloning base template...", total=None)
        await acquire_template(config.template, project_path, timeout=config.download_timeout)
    print_success("Base template cloned")

    with create_progress() as progress:
        progress.add_task("Configuring project...", total=None)
        composer = Composer(bundle_id_prefix=config.bundle_id_prefix)
        result = await composer.compose(project_path, project_name, selection)
    print_success("Project configured")

    if install:
        with create_progress() as progress:
            progress.add_task("Installing dependencies...", total=None)
            ok, detail = await install_dependencies(
                project_path, config.package_manager, timeout=config.install_timeout
            )
        if ok:
            print_success("Dependencies installed")
        else:
            print_warning("Dependency installation failed")
            if detail:
                console.print(f"[dim]{escape(detail)}[/dim]")
            print_warning(f"Run '{config.package_manager} install' manually in the project directory")

    return result


def report(result: CompositionResult, config: Config) -> None:
    """Print what was added and how to start the app."""
    print_summary_table(
        {
            "Project": str(result.project_path),
            "Slug": result.identity.slug,
            "Bundle identifier": result.identity.bundle_id,
            "Modules": ", ".join(result.modules),
            "Dependencies added": ", ".join(result.dependencies) or "-",
            "Plugins added": ", ".join(result.plugins) or "-",
            "Files generated": str(len(result.files)),
        },
        title="Project summary",
    )
    print_next_steps([
        f"cd {result.identity.raw_name}",
        f"{config.package_manager} start",
    ])
    print_success("Happy coding!")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-rn-app",
        description="Create a new React Native app with an optional backend and paywall",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-rn-app\n"
            "  create-rn-app my-app --backend firebase --paywall\n"
            "  create-rn-app my-app --yes --template ./my-template --skip-install\n"
        ),
    )
    parser.add_argument("name", nargs="?", default=None, help="Project name (prompted if omitted)")
    parser.add_argument(
        "--backend",
        choices=[b.value for b in Backend],
        default=None,
        help="Backend integration (prompted if omitted)",
    )
    parser.add_argument(
        "--paywall",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add the Superwall paywall integration (prompted if omitted)",
    )
    parser.add_argument(
        "--template",
        default=None,
        help="Base template: GitHub 'owner/repo[#ref]' or a local directory",
    )
    parser.add_argument(
        "--package-manager",
        default=None,
        help="Package manager used to install dependencies (default: pnpm)",
    )
    parser.add_argument("--skip-install", action="store_true", help="Do not install dependencies")
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Accept defaults for every question not answered by a flag",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``create-rn-app`` and ``python -m create_rn_app``."""
    args = build_parser().parse_args(argv)

    config = Config.from_env()
    if args.template:
        config.template = args.template
    if args.package_manager:
        config.package_manager = args.package_manager

    print_intro("create-rn-app")

    try:
        project_name, selection = collect_answers(args, config)
    except InvalidProjectName as exc:
        print_error(exc.reason)
        return 1
    except (KeyboardInterrupt, EOFError):
        console.print()
        print_warning("Operation cancelled.")
        return 0

    try:
        result = asyncio.run(scaffold(config, project_name, selection, install=not args.skip_install))
    except TemplateAcquisitionFailure as exc:
        print_error("Failed to clone template")
        print_error(f"{exc}. Check your internet connection.")
        return 1
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        print_warning(
            f"The partially created project was left at {config.project_path(project_name)} "
            "for inspection."
        )
        return 1
    except KeyboardInterrupt:
        console.print()
        print_warning("Operation cancelled.")
        project_path = config.project_path(project_name)
        if project_path.exists():
            print_warning(f"The partially created project was left at {project_path}.")
        return 0

    report(result, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
