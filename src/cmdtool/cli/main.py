"""Main CLI entry point for the cmdtool command-line tool.

Provides quick diagnostic commands: XML trail walking and path lookups,
directory listing, host resolution, local IP checks and java version
detection.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from cmdtool import __version__
from cmdtool.parsers import detect_java_version
from cmdtool.render import Appender, ColorSetting, RendererUtility
from cmdtool.shared import (
    AnsiMode,
    ConfigError,
    ToolConfig,
    configure_logging,
    get_logger,
)
from cmdtool.system import CommandRunner, PowershellUtility, RunCommandError
from cmdtool.trail import (
    EndElement,
    StartElement,
    TrailWalker,
    XmlProcessingError,
    XmlProcessor,
)

from .context import ToolContext


class TrailPrinter(XmlProcessor):
    """Writes every element trail, optionally with attributes and text."""

    def __init__(self, out: Appender, show_text: bool = False,
                 show_attributes: bool = False) -> None:
        self.out = out
        self.show_text = show_text
        self.show_attributes = show_attributes

    def process_element_start(self, trail: Sequence[str], element: StartElement) -> None:
        self.out.start_line().pad(2 * (len(trail) - 1))
        self.out.append_keyword("/".join(trail))
        if self.show_attributes and element.attributes:
            rendered = ", ".join(f"{a.local_name}={a.value}" for a in element.attributes)
            self.out.append(" [").append(rendered, ColorSetting.SYMBOL).append("]")
        self.out.end_line()

    def process_characters(self, trail: Sequence[str], text: str) -> None:
        if self.show_text:
            self.out.start_line().pad(2 * len(trail))
            self.out.append(text, ColorSetting.INFO).end_line()


class PathFinder(XmlProcessor):
    """Collects text or an attribute value of elements matching a path."""

    def __init__(self, path: str, attribute: Optional[str] = None,
                 exact: bool = False) -> None:
        self.path = path
        self.attribute = attribute
        self.exact = exact
        self.matches: List[str] = []

    def _matches(self, trail: Sequence[str]) -> bool:
        if self.exact:
            return TrailWalker.is_path(trail, self.path)
        return TrailWalker.path_ends_with(trail, self.path)

    def process_element_start(self, trail: Sequence[str], element: StartElement) -> None:
        if self.attribute and self._matches(trail):
            value = TrailWalker.get_attribute(element, self.attribute)
            if value is not None:
                self.matches.append(value)

    def process_characters(self, trail: Sequence[str], text: str) -> None:
        if not self.attribute and self._matches(trail):
            self.matches.append(text)


class ElementCounter(XmlProcessor):
    """Counts closed elements by tag name."""

    def __init__(self) -> None:
        self.counts = {}

    def process_element_end(self, trail: Sequence[str], element: EndElement) -> None:
        self.counts[element.local_name] = self.counts.get(element.local_name, 0) + 1


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="cmdtool",
        description="Quick diagnostic commands for XML files, processes and hosts",
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--cwd", help="Working path used to resolve relative paths")
    parser.add_argument("--config", "-c", type=Path, help="Configuration file path")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("pwd", help="Show the current working path")
    subparsers.add_parser("ls", help="List files in the current working path")

    walk_parser = subparsers.add_parser("walk", help="Print the element trails of an XML file")
    walk_parser.add_argument("file", help="XML file to walk")
    walk_parser.add_argument("--text", "-t", action="store_true", help="Show element text")
    walk_parser.add_argument(
        "--attributes", "-a", action="store_true", help="Show element attributes"
    )

    find_parser = subparsers.add_parser(
        "find", help="Print the text or attribute of elements matching a path"
    )
    find_parser.add_argument("file", help="XML file to search")
    find_parser.add_argument("path", help="Trail suffix such as system.webServer/httpErrors")
    find_parser.add_argument("--attribute", "-a", help="Print this attribute instead of text")
    find_parser.add_argument(
        "--exact", action="store_true", help="Match the full path from the root"
    )

    count_parser = subparsers.add_parser("count", help="Count elements by tag name")
    count_parser.add_argument("file", help="XML file to count")

    host_parser = subparsers.add_parser("host", help="Resolve a host name (PowerShell)")
    host_parser.add_argument("host_name", help="Host to resolve")

    ip_parser = subparsers.add_parser(
        "is-local-ip", help="Check if an IP is bound to this machine (PowerShell)"
    )
    ip_parser.add_argument("ip", help="IP address to look for")

    java_parser = subparsers.add_parser("java-version", help="Show the java version")
    java_parser.add_argument("--java-home", help="Java home (defaults to JAVA_HOME or PATH)")

    return parser


def load_config(args: argparse.Namespace) -> ToolConfig:
    """Build the configuration from the config file and command-line flags."""
    config = ToolConfig.from_file(args.config) if args.config else ToolConfig()
    if args.no_color:
        config = config.override(renderer__ansi_mode=AnsiMode.NEVER)
    if args.verbose:
        config = config.override(logging_level="DEBUG")
    elif args.quiet:
        config = config.override(logging_level="ERROR")
    return config


def cmd_walk(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    out = context.renderer.start()
    walker = TrailWalker(config.walker)
    summary = walker.process_xml_file(
        context.get_path(args.file), TrailPrinter(out, args.text, args.attributes)
    )
    out.append(
        f"{summary.elements} elements, max depth {summary.max_depth}, "
        f"{summary.processing_time_ms:.1f}ms",
        ColorSetting.TITLE,
    ).end_line()
    print(out.render(), end="")
    return 0


def cmd_find(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    finder = PathFinder(args.path, args.attribute, args.exact)
    TrailWalker(config.walker).process_xml_file(context.get_path(args.file), finder)

    out = context.renderer.start()
    if not finder.matches:
        out.warn(f"Nothing found for {args.path}").end_line()
        print(out.render(), end="")
        return 1

    for match in finder.matches:
        out.writeln(match)
    print(out.render(), end="")
    return 0


def cmd_count(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    counter = ElementCounter()
    TrailWalker(config.walker).process_xml_file(context.get_path(args.file), counter)

    ranked = sorted(counter.counts.items(), key=lambda item: (-item[1], item[0]))
    out = context.renderer.start()
    context.renderer.render_columns(
        out,
        [["Tag"] + [tag for tag, _ in ranked], ["Count"] + [str(n) for _, n in ranked]],
    )
    print(out.render(), end="")
    return 0


def cmd_host(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    hosts = PowershellUtility(CommandRunner(config.process)).resolve_host(args.host_name)
    out = context.renderer.start()
    if not hosts:
        out.warn(f"Could not resolve {args.host_name}").end_line()
    else:
        with out.indent():
            for host in hosts:
                out.writeln(host)
    print(out.render(), end="")
    return 0 if hosts else 1


def cmd_is_local_ip(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    is_local = PowershellUtility(CommandRunner(config.process)).is_local_ip(args.ip)
    out = context.renderer.start()
    out.append(f"{args.ip} ")
    if is_local:
        out.append("is on this machine", ColorSetting.INFO)
    else:
        out.append("is NOT on this machine", ColorSetting.WARN)
    print(out.render())
    return 0


def cmd_java_version(args: argparse.Namespace, context: ToolContext, config: ToolConfig) -> int:
    java_home = context.get_path(args.java_home) if args.java_home else None
    info = detect_java_version(CommandRunner(config.process), java_home)
    out = context.renderer.start()
    if info is None:
        out.warn("No java executable found").end_line()
        print(out.render(), end="")
        return 1

    out.write_title(info.version or "unknown version")
    context.renderer.render_mapping(out, info.meta)
    print(out.render(), end="")
    return 0


COMMANDS = {
    "walk": cmd_walk,
    "find": cmd_find,
    "count": cmd_count,
    "host": cmd_host,
    "is-local-ip": cmd_is_local_ip,
    "java-version": cmd_java_version,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging_level)
    logger = get_logger(__name__, "cli")
    renderer = RendererUtility(config.renderer)
    context = ToolContext(renderer)

    if args.cwd:
        requested = context.get_path(args.cwd)
        status = context.cd(requested)
        if context.current_path != requested.resolve():
            print(status, file=sys.stderr)
            return 1

    try:
        if args.command == "pwd":
            print(context.pwd())
            return 0
        if args.command == "ls":
            print(context.ls(), end="")
            return 0
        return COMMANDS[args.command](args, context, config)

    except (XmlProcessingError, RunCommandError) as e:
        logger.debug("Command failed", extra={"error": str(e)})
        out = renderer.start()
        out.error(str(e))
        print(out.render(), file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
