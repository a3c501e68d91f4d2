# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
Reading and writing of the configuration file.
"""

import os

from configobj import ConfigObj, ConfigObjError

from deployregression.errors import DeployRegressionError
from deployregression.log import colorize

DEFAULT_CONF_FNAME = os.path.expanduser(
    os.path.join("~", ".deployregression", "deployregression.cfg")
)
API_URL = "https://api.vercel.com"
# file written by the deployment CLI when a directory is linked to a project
LINKED_PROJECT_FNAME = os.path.join(".vercel", "project.json")

# default values when not defined in config file.
# Note that this is also the list of options that can be used in config file
DEFAULTS = {
    "token": None,
    "team": None,
    "api-url": API_URL,
    "http-timeout": 30.0,
    "page-size": 100,
    "page-delay": 1.0,
    "command": None,
}


def get_config(config_path):
    """
    Get custom defaults from configuration file in argument.
    """
    config = dict(DEFAULTS)
    if config_path is None:
        return config
    try:
        read_conf = ConfigObj(config_path)
    except ConfigObjError as exc:
        raise DeployRegressionError(
            "Error while reading the config file %s:\n  %s" % (config_path, exc)
        )
    config.update(read_conf)
    return config


def _get_token(default):
    print(
        "An access token is required to read the deployments of your"
        " projects. You can create one from your account settings."
    )
    value = input("token: ")
    return value or default


def _get_team(default):
    print(
        "If your projects belong to a team, type the team id (team_...)."
        " Leave blank to use your personal account."
    )
    value = input("team: ")
    if value == "NONE":
        return ""
    return value or default


CONF_HELP = """\
# ------ deployregression configuration file ------

# Most of the command line options can be used in here.
# Just remove the -- from the long option names, e.g.

# http-timeout = 60
# page-delay = 0.5


"""


def write_config(conf_path):
    conf_dir = os.path.dirname(conf_path)
    if not os.path.isdir(conf_dir):
        os.makedirs(conf_dir)

    config = ConfigObj(conf_path)
    if not config.initial_comment:
        config.initial_comment = CONF_HELP.splitlines()

    def _set_option(optname, getfunc, default):
        print()
        if optname not in config:
            value = getfunc(default)
            if value is not None:
                config[optname] = value
            else:
                value = default
        else:
            print("%s already defined." % optname)
            value = config[optname]
        name = colorize("{fGREEN}%s{sRESET_ALL}" % optname)
        print("%s: %s" % (name, value))

    _set_option("token", _get_token, "")
    _set_option("team", _get_team, "")

    config.write()

    print()
    print(colorize("Config file {sBRIGHT}%s{sRESET_ALL} written." % conf_path))
    print(
        "Note you can edit it manually, and there are other options you can"
        " configure (api-url, http-timeout, page-size, page-delay, command)."
    )
