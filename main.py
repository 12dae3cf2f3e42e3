import logging
import os
import sys

from rich.console import Console

from clasp import *

console = Console(highlight=False, markup=False)

base = SubCommand(options=(
    switch("v", "verbose", help="Give more output."),
    switch("q", "quiet", help="Give less output."),
    value(long="log", tag="path", help="Path to a verbose appending log."),
    switch(long="no-input", help="Disable prompting for input."),
))

install = SubCommand("install", (
    value("e", "editable", "path/url", help="Install a project in editable mode."),
    value("r", "requirement", "file", help="Install from the given requirements file."),
    value("t", "target", "dir", help="Install packages into <dir>."),
    switch("U", "upgrade", help="Upgrade all packages to the newest available version."),
    switch(long="no-deps", help="Don't install package dependencies."),
    # not listed in the summary
    switch(long="secret"),
    catchall("PACKAGE", help="Packages to install."),
))


def callback(parser, subcommand, option, value):
    line = "CB: "
    if subcommand.name is not None:
        line += subcommand.name + " >> "
    if option is not None:
        line += option.display()
        if option.tag is not None and option.mode is not Mode.CATCHALL:
            line += f" <{option.tag}>"
    if value is not None:
        line += "  -> " + value
    console.print(line)


pip = Parser(
    "pip",
    header="A tool for installing and managing Python packages",
    footer="Copyright (c) 2020 someone",
    version="1.2.3-alpha",
    base=base,
    subcommands=(install,),
    callback=callback,
    autohelp=True,
    autoversion=True,
    colorful=sys.stdout.isatty(),
)


if __name__ == '__main__':
    if os.environ.get("CLASP_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")
    pip.verify()
    sys.exit(parse(pip))
