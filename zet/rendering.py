"""
Zet help rendering (global help, usage lines, per-command help)

Scope
- Pure functions that turn the registry and compiled signatures into
  rich Text. Nothing is printed here; callers decide where output goes.
- Plain text is always available through Text.plain, and colorful=False
  renders the exact same characters without any styling.

Layout
- Global help
      Usage: zet <command> [options]

      <group descr or prefix>:
        <prefix> <name>    <descr>

      Commands:
        <name> ...         <descr>

      Run "zet <command> --help" for more information.

  Labels share a single column whose width is the longest label plus four
  spaces. Groups without commands are skipped; " ..." marks default-group
  commands that accept rest tokens.

- Usage line
      Usage: zet [<prefix> ]<name> <required>... [<optional>]... [args...] [options]

- Command help
      usage line, optional indented description, "Arguments:" block and an
      "Options:" block that always ends with "--help, -h    Show help".

Styling
- The palette below can be overridden through a __styles__ mapping in
  __main__, following the same convention as fault rendering.
"""
from rich.text import Text

from .utils import palette


def _palette(colorful):
    styles = palette({
        "usage-label": "bold #FFFFFF",
        "program-name": "bold #36C5F0",
        "command-name": "bold #36C5F0",
        "argument-name": "bold #FFD600",
        "option-name": "bold #22C55E",
        "metavar": "#FFD600",
        "section-title": "bold #FFFFFF",
        "description": "#D1D5DB",
        "required": "dim",
        "hint": "#9CA3AF",
    })

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _columns(rows, styler, /):
    """
    Render (label, label-style, descr, descr-style) rows as aligned lines
    indented by two spaces; the label column is the widest label + 4.
    """
    width = max((len(label) for label, *_ in rows), default=0) + 4
    lines = []
    for label, label_style, descr, descr_style in rows:
        line = Text("  ")
        line.append(label, styler(label_style))
        line.append(" " * (width - len(label)))
        line.append_text(descr if isinstance(descr, Text) else Text(descr, styler(descr_style)))
        lines.append(line)
    return lines


def _usage(command, prog, styler, /):
    signature = command.signature
    usage = Text()
    usage.append("Usage:", styler("usage-label")).append(" ")
    usage.append(prog, styler("program-name")).append(" ")
    if (prefix := command.group.prefix) is not None:
        usage.append(prefix, styler("command-name")).append(" ")
    usage.append(signature.name, styler("command-name"))
    for argument in signature.arguments:
        usage.append(" ")
        usage.append(f"<{argument.name}>" if argument.required else f"[{argument.name}]", styler("argument-name"))
    if signature.rest:
        usage.append(" ").append("[args...]", styler("argument-name"))
    if signature.options:
        usage.append(" ").append("[options]", styler("option-name"))
    return usage


def render_usage(command, /, *, prog="zet", colorful=True):
    """
    Render the single usage line of a command.

    The command is duck-typed: it needs a "signature" and a "group" whose
    "prefix" is None for the default group.
    """
    return _usage(command, prog, _palette(colorful))


def render_global_help(registry, /, *, prog=None, colorful=True):
    """
    Render the overview of every registered command.

    Named groups come first, in creation order, then the default group under
    "Commands". A group is listed under its description, or its prefix when
    it has none. Empty groups are skipped.
    """
    styler = _palette(colorful)
    prog = prog if prog is not None else registry.prog

    sections = []
    for group in registry.groups.values():
        if group.commands:
            sections.append((group.descr or group.prefix, [
                (f"{group.prefix} {name}", command.descr or "")
                for name, command in group.commands.items()
            ]))
    if (default := registry.default).commands:
        sections.append(("Commands", [
            (name + " ..." if command.signature.rest else name, command.descr or "")
            for name, command in default.commands.items()
        ]))

    width = max((len(label) for _, entries in sections for label, _ in entries), default=0)

    lines = [
        Text.assemble(
            ("Usage:", styler("usage-label")), " ",
            (prog, styler("program-name")), " ",
            ("<command>", styler("command-name")), " ",
            ("[options]", styler("option-name")),
        ),
        Text(),
    ]
    for title, entries in sections:
        lines.append(Text.assemble((title, styler("section-title")), ":"))
        for label, descr in entries:
            lines.append(Text.assemble(
                "  ",
                (label, styler("command-name")),
                " " * (width - len(label) + 4),
                (descr, styler("description")),
            ))
        lines.append(Text())
    lines.append(Text(f'Run "{prog} <command> --help" for more information.', styler("hint")))
    return Text("\n").join(lines)


def render_command_help(command, /, *, prog="zet", colorful=True):
    """
    Render the full help of one command.

    Blocks, in order
    - the usage line;
    - the description, indented by two spaces, when present;
    - "Arguments:" with each name, its description and " (required)";
    - "Options:" with each long name (plus " <value>" when it takes one and
      ", -XY" when it has a short alias), then the built-in help entry.
    """
    styler = _palette(colorful)
    signature = command.signature

    lines = [_usage(command, prog, styler)]

    if command.descr:
        lines.append(Text())
        lines.append(Text.assemble("  ", (command.descr, styler("description"))))

    if signature.arguments:
        lines.append(Text())
        lines.append(Text.assemble(("Arguments", styler("section-title")), ":"))
        lines.extend(_columns([
            (
                argument.name,
                "argument-name",
                Text.assemble(
                    (argument.descr, styler("description")),
                    (" (required)" if argument.required else "", styler("required")),
                ),
                "description",
            )
            for argument in signature.arguments
        ], styler))

    rows = []
    for option in signature.options:
        label = option.name
        if option.value:
            label += " <value>"
        if option.short is not None:
            label += ", " + option.short
        rows.append((label, "option-name", option.descr, "description"))
    rows.append(("--help, -h", "option-name", "Show help", "description"))

    lines.append(Text())
    lines.append(Text.assemble(("Options", styler("section-title")), ":"))
    lines.extend(_columns(rows, styler))
    return Text("\n").join(lines)


__all__ = (
    "render_global_help",
    "render_usage",
    "render_command_help",
)
