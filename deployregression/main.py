# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
Entry point for the deployregression command line.
"""

import os
import sys

import colorama
from mozlog import get_proxy_logger
from requests.exceptions import RequestException

from deployregression.bisector import Bisection, Bisector, BisectorHandler
from deployregression.cli import cli
from deployregression.errors import (
    CrossProjectMismatch,
    DeployRegressionError,
    EmptyHistoryError,
    ProjectNotFound,
)
from deployregression.history import DeploymentHistory
from deployregression.network import ApiClient, set_http_session
from deployregression.references import ReferenceResolver
from deployregression.test_runner import CommandTestRunner, ManualTestRunner

LOG = get_proxy_logger("main")


class Application(object):
    def __init__(self, options, client=None):
        self.options = options
        self.client = client or ApiClient(
            api_url=options.api_url, token=options.token, team=options.team
        )
        self._test_runner = None
        self._bisector = None

    @property
    def test_runner(self):
        if self._test_runner is None:
            if self.options.command is None:
                self._test_runner = ManualTestRunner()
            else:
                self._test_runner = CommandTestRunner(self.options.command)
        return self._test_runner

    @property
    def bisector(self):
        if self._bisector is None:
            self._bisector = Bisector(self.test_runner)
        return self._bisector

    def find_project(self, good_ref, bad_ref):
        """
        Returns the id of the project to bisect.
        """
        ref = bad_ref or good_ref
        if ref is not None and not self.options.project:
            return ref.project_id
        project = self.client.project(self.options.project)
        if not project:
            raise ProjectNotFound("Unable to find the project `%s`" % self.options.project)
        project_id = project.get("id")
        if ref is not None and ref.project_id != project_id:
            raise CrossProjectMismatch(
                "Deployment %s does not belong to project %s"
                % (ref.hostname, self.options.project)
            )
        LOG.info("Bisecting project \"%s\"" % project.get("name", project_id))
        return project_id

    def create_window(self, project_id, good_ref, bad_ref):
        """
        Fetch the history and returns a tuple (good, bad, window), window
        being the deployments between good and bad (both excluded),
        newest first.
        """
        history = DeploymentHistory(
            self.client,
            project_id,
            page_size=self.options.page_size,
            page_delay=self.options.page_delay,
        )
        LOG.info("Retrieving deployments...")
        good = good_ref.deployment if good_ref else None
        bad = bad_ref.deployment if bad_ref else None
        window = history.deployments(
            until=bad.created - 1 if bad else None, stop_at=good,
        )
        if good is not None and window and window[-1] == good:
            window.pop()
        # missing references are taken from both ends of the window
        defaulted = [name for name, ref in (("bad", bad), ("good", good)) if ref is None]
        if len(window) < len(defaulted):
            raise EmptyHistoryError(
                "Can not bisect: found %d deployment(s), not enough to default the %s"
                " deployment" % (len(window), " and ".join(defaulted))
            )
        if bad is None:
            bad = window.pop(0)
            LOG.info("No 'bad' deployment specified, using %s" % bad.describe())
        if good is None:
            good = window.pop()
            LOG.info("No 'good' deployment specified, using %s" % good.describe())
        return good, bad, window

    def bisect(self):
        resolver = ReferenceResolver(self.client)
        good_ref, bad_ref, path = resolver.resolve_range(
            self.options.good, self.options.bad, path=self.options.path
        )
        project_id = self.find_project(good_ref, bad_ref)
        good, bad, window = self.create_window(project_id, good_ref, bad_ref)
        LOG.info(
            "Bisecting %d deployments between %s and %s"
            % (len(window), good.describe(), bad.describe())
        )
        handler = BisectorHandler(path=path)
        result = self.bisector.bisect(handler, window, bad)
        if result == Bisection.FINISHED:
            LOG.info("No more deployments, bisection finished.")
            return 0
        return 1


def main(argv=None, namespace=None):
    """
    main entry point of deployregression command line.
    """
    # terminal color support on windows
    if os.name == "nt":
        colorama.init()

    config, app = None, None
    try:
        config = cli(argv=argv, namespace=namespace)
        config.validate()
        set_http_session(get_defaults={"timeout": config.options.http_timeout})
        app = Application(config.options)
        sys.exit(app.bisect())

    except (KeyboardInterrupt, EOFError):
        sys.exit("\nInterrupted.")
    except (DeployRegressionError, RequestException) as exc:
        LOG.error(str(exc)) if config else sys.exit(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
