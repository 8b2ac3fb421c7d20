"""Command-line interface."""

import logging
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jinja2 import TemplateError

from assetlink.errors import AssetError
from assetlink.files import create_project
from assetlink.logs import fatal, setup_logging, verbosity_level
from assetlink.project import Project
from assetlink.resource import ContentResource


def main():
    parser, commands = get_parser()
    args = parser.parse_args()
    if args.command == "help":
        if args.help_target:
            commands[args.help_target].print_help()
        else:
            parser.print_help()
        return

    log_level = verbosity_level(args.verbose)
    exit_level = logging.ERROR
    if args.keep_going:
        exit_level = logging.FATAL
    setup_logging(sys.stderr, log_level, exit_level)

    command = globals()[f"command_{args.command}"]
    assert command, "unexpected command name"
    try:
        command(args)
    except AssetError as ex:
        fatal("%s", ex)
    except TemplateError as ex:
        fatal("template error: %s", ex)


def get_parser() -> Tuple[ArgumentParser, Mapping[str, ArgumentParser]]:
    parser = ArgumentParser(
        prog="assetlink", description="resolve and name assets referenced by templates"
    )
    commands = parser.add_subparsers(metavar="command", dest="command", required=True)

    parser_help = commands.add_parser("help", help="show this help message and exit")
    parser_help.add_argument(
        metavar="command",
        dest="help_target",
        nargs="?",
        help="get help for a specific command",
    )

    parser_new = commands.add_parser("new", help="create a new project")
    parser_new.add_argument("name", help="project name")

    parser_list = commands.add_parser("list", help="list repository resources")
    parser_list.add_argument(
        "-f", "--files", action="store_true", help="show file paths instead of repository paths"
    )
    parser_list.add_argument(
        "glob", nargs="?", default="/**", help="filter resources by glob",
    )

    parser_resolve = commands.add_parser("resolve", help="show what inputs resolve to")
    parser_resolve.add_argument("inputs", metavar="input", nargs="+", help="asset input")
    parser_resolve.add_argument(
        "-d", "--dir", default=None, help="repository directory of relative inputs"
    )
    parser_resolve.add_argument(
        "--debug", action="store_true", help="show the target path of each leaf"
    )

    parser_name = commands.add_parser("name", help="generate the name of an asset")
    parser_name.add_argument("inputs", metavar="input", nargs="+", help="asset input")
    parser_name.add_argument(
        "-d", "--dir", default=None, help="repository directory of relative inputs"
    )
    parser_name.add_argument(
        "-f", "--filter", dest="filters", action="append", default=[], help="filter name"
    )

    parser_render = commands.add_parser("render", help="render a template")
    parser_render.add_argument("template", help="repository path of the template")

    for subparser in [parser_resolve, parser_name, parser_render]:
        subparser.add_argument(
            "--var",
            dest="vars",
            metavar="NAME=VALUE",
            action="append",
            default=[],
            help="set a variable (can use multiple times)",
        )

    for subparser in [parser_new, parser_list, parser_resolve, parser_name, parser_render]:
        subparser.add_argument(
            "-k",
            "--keep-going",
            action="store_true",
            help="keep going if there are errors",
        )
        subparser.add_argument(
            "-v",
            "--verbose",
            action="count",
            help="increase logging (can use multiple times)",
        )

    return parser, commands.choices


def parse_values(pairs: List[str]) -> Dict[str, str]:
    """Parse NAME=VALUE arguments."""
    values = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            fatal("invalid variable %r (expected NAME=VALUE)", pair)
        values[name] = value
    return values


def command_new(args: Namespace):
    print(f"Creating a new assetlink project in {args.name}/")
    create_project(Path.cwd(), args.name)


def command_list(args: Namespace):
    project = Project.find()
    for resource in project.resources(args.glob):
        if not isinstance(resource, ContentResource):
            continue
        print(resource.local_path if args.files and resource.local_path else resource.path)


def command_resolve(args: Namespace):
    project = Project.find()
    values = parse_values(args.vars)
    options: Dict[str, Any] = {"vars": list(values)}
    if args.debug:
        options["debug"] = True
    asset = project.factory.create_asset(args.inputs, options=options)
    asset.supply_context(args.dir, values)
    printer = InfoPrinter()
    printer.topic(asset.target_path)
    printer.heading("Leaves")
    for leaf in asset:
        source = leaf.source_path
        if leaf.source_root:
            source = f"{leaf.source_root}/{source}"
        if args.debug:
            printer.item(f"{source} -> {leaf.target_path}")
        else:
            printer.item(source)


def command_name(args: Namespace):
    project = Project.find()
    values = parse_values(args.vars)
    options: Dict[str, Any] = {}
    if values:
        options["vars"] = list(values)
    name = project.factory.generate_asset_name(args.inputs, args.filters, options)
    name.supply_context(args.dir)
    print(name)


def command_render(args: Namespace):
    project = Project.find()
    env = project.environment()
    template = env.get_template(args.template)
    print(template.render(**parse_values(args.vars)))


class InfoPrinter:

    """Helper class for printing indented command output."""

    def __init__(self):
        self.first = True

    def topic(self, s: Optional[Any]):
        if not self.first:
            print()
        self.first = False
        print(s)

    def heading(self, s: Any):
        print(f"\n    {s}:")

    def item(self, s: Any):
        print(f"    {s}")
