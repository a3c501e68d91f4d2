# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
This module implements a :class:`TestRunner` interface for testing
deployments and two implementations, :class:`ManualTestRunner` and
:class:`CommandTestRunner`.
"""

import os
import shlex
import subprocess
from abc import ABCMeta, abstractmethod

from mozlog import get_proxy_logger

from deployregression.dates import format_timestamp
from deployregression.errors import TestCommandError
from deployregression.log import colorize

LOG = get_proxy_logger("Test Runner")

# exit code of a test command meaning that the deployment can not be tested
SKIP_RETCODE = 125

VERDICT_NAMES = {"g": "good", "b": "bad", "s": "skip"}


def verdict_for_retcode(retcode):
    """
    Returns the verdict letter for the exit code of a test command.
    """
    if retcode == 0:
        return "g"
    elif retcode == SKIP_RETCODE:
        return "s"
    return "b"


class TestRunner(metaclass=ABCMeta):
    """
    Abstract class that allows to test a deployment.

    :meth:`evaluate` must be implemented by subclasses.
    """

    @abstractmethod
    def evaluate(self, deployment, path=""):
        """
        Evaluate a given deployment. Must returns a verdict.

        The verdict must be a letter that indicate the state of the
        deployment: 'g', 'b' or 's' respectively for 'good', 'bad' or
        'skip'.

        :param deployment: a :class:`deployregression.deployment.Deployment`
        :param path: the subpath of the deployment url to test
        """
        raise NotImplementedError


class ManualTestRunner(TestRunner):
    """
    A TestRunner subclass that ask for evaluation by prompting in the
    terminal.
    """

    def get_verdict(self, deployment, path=""):
        """
        Ask and returns the verdict.
        """
        options = ["good", "bad", "skip"]
        # allow user to just type one letter
        allowed_inputs = options + [o[0] for o in options]
        LOG.info(
            colorize(
                "Please inspect {sBRIGHT}%s{sRESET_ALL}, then enter one of:"
                " good, bad, or skip"
            )
            % deployment.full_url(path)
        )
        while True:
            verdict = input("Action: ").strip().lower()
            if verdict in allowed_inputs:
                break
            LOG.error("Invalid action: %s" % verdict)
        # shorten verdict to one character for processing...
        return verdict[0]

    def evaluate(self, deployment, path=""):
        return self.get_verdict(deployment, path)


class CommandTestRunner(TestRunner):
    """
    A TestRunner subclass that evaluate deployments given a shell command.

    The full url of the deployment is passed as the last argument of the
    command. Some variables are also available as environment variables,
    'DEPLOYREGRESSION_' is prepended and the variables names are upcased.
    Example: DEPLOYREGRESSION_URL, DEPLOYREGRESSION_HOSTNAME.

    The exit code of the command gives the verdict: 0 means good, 125
    means that the deployment can not be tested (skip) and anything else
    means bad.
    """

    def __init__(self, command):
        TestRunner.__init__(self)
        self.command = command

    def _env(self, deployment, path):
        variables = dict((k, "" if v is None else str(v)) for k, v in deployment.to_dict().items())
        variables["hostname"] = deployment.url
        variables["url"] = deployment.full_url(path)
        variables["created_date"] = format_timestamp(deployment.created)

        env = dict(os.environ)
        for k, v in variables.items():
            env["DEPLOYREGRESSION_" + k.upper()] = v
        return env

    def evaluate(self, deployment, path=""):
        url = deployment.full_url(path)
        cmdlist = shlex.split(self.command)
        if not cmdlist:
            raise TestCommandError("Unable to run the test command: empty command")
        cmdlist.append(url)
        LOG.info("Running test command: `%s`" % " ".join(shlex.quote(c) for c in cmdlist))
        try:
            retcode = subprocess.call(cmdlist, env=self._env(deployment, path))
        except OSError as exc:
            raise TestCommandError(
                "Unable to run the test command (%s not found or not executable): `%s`"
                % (cmdlist[0], exc)
            )
        verdict = verdict_for_retcode(retcode)
        LOG.info(
            "Test command result: %d (deployment is %s)" % (retcode, VERDICT_NAMES[verdict])
        )
        return verdict
