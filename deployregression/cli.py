"""
This module parses and checks the command line with :func:`cli` and return a
:class:`Configuration` object that hold information for running the
application.

:func:`cli` is intended to be the only public interface of this module.
"""

import json
import os
from argparse import SUPPRESS, Action, ArgumentParser

from deployregression import __version__
from deployregression.config import (
    DEFAULT_CONF_FNAME,
    LINKED_PROJECT_FNAME,
    get_config,
    write_config,
)
from deployregression.errors import DeployRegressionError
from deployregression.log import colorize, init_logger
from deployregression.references import parse_reference


class WriteConfigAction(Action):
    def __init__(self, option_strings, dest=SUPPRESS, default=SUPPRESS, help=None):
        super(WriteConfigAction, self).__init__(
            option_strings=option_strings, dest=dest, default=default, nargs=0, help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        write_config(DEFAULT_CONF_FNAME)
        parser.exit()


def parse_args(argv=None, defaults=None):
    """
    Parse command line options.
    """
    parser = create_parser(defaults=defaults)
    return parser.parse_args(argv)


def create_parser(defaults):
    """
    Create the deployregression command line parser (ArgumentParser instance).
    """
    usage = (
        "\n"
        " %(prog)s [OPTIONS] [--bad URL] [--good URL] [--path PATH] [--run COMMAND]"
        "\n"
        " %(prog)s --write-config"
    )

    parser = ArgumentParser(usage=usage)
    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
        help="print the deployregression version number and exits.",
    )

    parser.add_argument(
        "-b",
        "--bad",
        metavar="URL",
        help=(
            "known bad deployment url or hostname. It may contain the"
            " path to test. Defaults to the latest deployment."
        ),
    )

    parser.add_argument(
        "-g",
        "--good",
        metavar="URL",
        help=(
            "known good deployment url or hostname."
            " Defaults to the oldest deployment."
        ),
    )

    parser.add_argument(
        "-p",
        "--path",
        help=(
            "subpath of the deployment urls to test, e.g. /docs."
            " Overrides the path of the --bad and --good urls."
        ),
    )

    parser.add_argument(
        "-r",
        "--run",
        dest="command",
        default=defaults["command"],
        metavar="COMMAND",
        help=(
            "test command to run for each deployment instead of asking."
            " The deployment url is given as the last argument, and"
            " as the DEPLOYREGRESSION_URL environment variable. An exit"
            " code of 0 means good, 125 means skip, anything else"
            " means bad."
        ),
    )

    parser.add_argument(
        "--project",
        help=(
            "id or name of the project to bisect. Defaults to the project"
            " of the given deployments, or to the project linked to the"
            " current directory (%s)." % LINKED_PROJECT_FNAME
        ),
    )

    parser.add_argument(
        "--token", default=defaults["token"], help="API access token.",
    )

    parser.add_argument(
        "--team", default=defaults["team"], help="team id owning the project.",
    )

    parser.add_argument(
        "--api-url",
        default=defaults["api-url"],
        help="base url of the deployments API. Defaults to %(default)s.",
    )

    parser.add_argument(
        "--http-timeout",
        type=float,
        default=float(defaults["http-timeout"]),
        help=(
            "Timeout in seconds to abort requests when there is no activity"
            " from the server. Default to %(default)s seconds."
        ),
    )

    parser.add_argument(
        "--page-delay",
        type=float,
        default=float(defaults["page-delay"]),
        help=(
            "Delay in seconds between two requests of the deployment"
            " history, to avoid API rate limits. Default to %(default)s."
        ),
    )

    parser.add_argument(
        "--page-size",
        type=int,
        default=int(defaults["page-size"]),
        help=SUPPRESS,
    )

    parser.add_argument(
        "-d", "--debug", action="store_true", help="Show the debug output.",
    )

    parser.add_argument(
        "--write-config",
        action=WriteConfigAction,
        help="Helps to write the configuration file.",
    )

    return parser


def get_linked_project(directory=None):
    """
    Returns a couple (project_id, org_id) of the project linked to the
    given directory, or (None, None).
    """
    fname = os.path.join(directory or os.getcwd(), LINKED_PROJECT_FNAME)
    if not os.path.isfile(fname):
        return None, None
    try:
        with open(fname) as f:
            data = json.load(f)
    except ValueError as exc:
        raise DeployRegressionError("Unable to read %s: %s" % (fname, exc))
    return data.get("projectId"), data.get("orgId")


class Configuration(object):
    """
    Holds the configuration extracted from the command line + configuration file.

    This is usually instantiated by calling :func:`cli`.

    The constructor only initializes the `logger`.

    The configuration should not be used (except for the logger attribute)
    until :meth:`validate` is called.

    :attr logger: the mozlog logger, created using the command line options
    :attr options: the raw command line options
    """

    def __init__(self, options, config):
        self.options = options
        self.config = config
        self.logger = init_logger(debug=options.debug)

    def _ask(self, message):
        value = input(message).strip()
        print()
        return value

    def validate(self):
        """
        Validate the options, and ask the user for missing good, bad or
        path values when no test command is given.
        """
        options = self.options
        interactive = not options.command

        if not options.bad and interactive:
            options.bad = self._ask(
                "What's the deployment URL where the bug occurs\n"
                "  Leave blank for the latest deployment: "
            )
        if not options.good and interactive:
            options.good = self._ask(
                "What's a deployment URL where the bug does not occur\n"
                "  Leave blank for the oldest deployment: "
            )
        options.bad = options.bad or None
        options.good = options.good or None

        # check references early, before any network access
        paths = [parse_reference(value, kind)[1]
                 for value, kind in ((options.bad, "bad"), (options.good, "good")) if value]
        if not options.path and not any(paths) and interactive:
            options.path = self._ask("What's the URL path where the bug occurs: ")
        if options.path and not options.path.startswith("/"):
            options.path = "/" + options.path

        if not options.project and not (options.good or options.bad):
            project_id, org_id = get_linked_project()
            if project_id:
                self.logger.info("Using the project linked to the current directory")
                options.project = project_id
                if not options.team and org_id and org_id.startswith("team_"):
                    options.team = org_id
            else:
                raise DeployRegressionError(
                    "Unable to find the project to bisect. Use --project, or"
                    " give a --good or --bad deployment."
                )
        if options.page_size < 1:
            raise DeployRegressionError("page-size must be a positive number")


def cli(argv=None, conf_file=DEFAULT_CONF_FNAME, namespace=None):
    """
    parse cli args basically and returns a :class:`Configuration`.

    if namespace is given, it will be used as a arg parsing result, so no
    arg parsing will be done.
    """
    config = get_config(conf_file)
    if namespace:
        options = namespace
    else:
        options = parse_args(argv=argv, defaults=config)
    if conf_file and not os.path.isfile(conf_file):
        print("*" * 10)
        print(
            colorize(
                "You should use a config file. Please use the "
                + "{sBRIGHT}--write-config{sRESET_ALL}"
                + " command line flag to help you create one."
            )
        )
        print("*" * 10)
        print()
    return Configuration(options, config)
