# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
The bisection engine.

A bisection works on a *window*: the list of deployments that are not yet
classified, ordered newest first. The known bad deployment is not part of
the window, it is only used as the initial answer.
"""

import math

from mozlog import get_proxy_logger

from deployregression.dates import format_timestamp
from deployregression.errors import NoBadDeploymentFound
from deployregression.history import BisectionHistory
from deployregression.log import colorize

LOG = get_proxy_logger("Bisector")


def compute_steps_left(steps):
    """
    Rough estimate of the remaining steps, only used for display.
    """
    if steps <= 0:
        return 0
    return int(round(math.sqrt(steps)))


def _plural(count, word):
    return "%d %s%s" % (count, word, "" if count == 1 else "s")


class BisectorHandler(object):
    """
    React to events of a :class:`Bisector`.

    A BisectorHandler keep the state of the current bisection process,
    most notably :attr:`bad_deployment`, the last deployment known to be
    bad.
    """

    def __init__(self, path=""):
        self.path = path or ""
        self.window = None
        self.bad_deployment = None
        self.skipped = []

    def set_window(self, window):
        """
        Save a reference of the current window.

        This is called by the bisector before each step of the bisection
        process.
        """
        self.window = window

    def testing(self, mid):
        deployment = self.window[mid]
        LOG.info(
            "Bisecting: %s left to test after this (roughly %s)"
            % (
                _plural(len(self.window) - 1, "deployment"),
                _plural(compute_steps_left(len(self.window)), "step"),
            )
        )
        LOG.info(colorize("{sBRIGHT}Created At:{sRESET_ALL} %s")
                 % format_timestamp(deployment.created))
        commit = deployment.commit
        if commit:
            LOG.info(colorize("{sBRIGHT}Commit:{sRESET_ALL} %s [%s]")
                     % (commit.message, deployment.short_sha))
        LOG.info(colorize("{sBRIGHT}Deployment URL:{sRESET_ALL} %s")
                 % deployment.full_url(self.path))

    def _print_progress(self, new_window):
        LOG.debug(
            "Narrowed window from %s to %s"
            % (_plural(len(self.window), "deployment"), _plural(len(new_window), "deployment"))
        )

    def build_good(self, mid, new_window):
        self._print_progress(new_window)

    def build_bad(self, mid, new_window):
        self.bad_deployment = self.window[mid]
        self._print_progress(new_window)

    def build_skip(self, mid):
        self.skipped.append(self.window[mid])

    def finished(self):
        """
        Log the result of the bisection.
        """
        bad = self.bad_deployment
        LOG.info(colorize("{fRED}First bad deployment:{sRESET_ALL} %s")
                 % bad.full_url(self.path))
        LOG.info("Created At: %s" % format_timestamp(bad.created))
        commit = bad.commit
        if commit:
            LOG.info("Commit: %s [%s]" % (commit.message, bad.short_sha))
        hidden = [d for d in self.skipped if d.created > bad.created]
        if hidden:
            LOG.warning(
                "%s newer than the first bad one could not be tested and"
                " may contain the regression: %s"
                % (_plural(len(hidden), "skipped deployment"), ", ".join(d.url for d in hidden))
            )


class Bisection(object):
    RUNNING = 0
    FINISHED = 1

    def __init__(self, handler, window, test_runner):
        self.handler = handler
        self.window = list(window)
        self.test_runner = test_runner
        self.history = BisectionHistory()

    def search_mid_point(self):
        """
        Returns the index of the next deployment to test.

        For an even length this is the upper middle, so the newer half is
        the bigger one.
        """
        self.handler.set_window(self.window)
        return len(self.window) // 2

    def evaluate(self, mid):
        self.handler.testing(mid)
        return self.test_runner.evaluate(self.window[mid], path=self.handler.path)

    def handle_verdict(self, mid, verdict):
        if verdict == "g":
            # the window is newest first, so if the deployment is good
            # we have to split from
            # [?, ?, ?, G, ?, ?]
            # to
            # [?, ?, ?]
            new_window = self.window[:mid]
            self.handler.build_good(mid, new_window)
        elif verdict == "b":
            # if the deployment is bad, it becomes the best known bad, and
            # we split from
            # [?, ?, ?, B, ?, ?]
            # to
            #             [?, ?]
            new_window = self.window[mid + 1:]
            self.handler.build_bad(mid, new_window)
        elif verdict == "s":
            new_window = self.window[:mid] + self.window[mid + 1:]
            self.handler.build_skip(mid)
        else:
            raise ValueError("Unknown verdict %r" % verdict)
        self.history.add(self.window, mid, verdict)
        self.window = new_window
        if not self.window:
            return self.FINISHED
        return self.RUNNING


class Bisector(object):
    """
    Handle the logic of the bisection process, and report events to a given
    :class:`BisectorHandler`.
    """

    def __init__(self, test_runner):
        self.test_runner = test_runner

    def bisect(self, handler, window, bad):
        """
        Bisect the *window* (deployments newest first, none of them being
        tested yet) knowing that *bad* is bad.

        Returns :attr:`Bisection.FINISHED` and the first bad deployment
        is then available as `handler.bad_deployment`.
        """
        handler.bad_deployment = bad
        bisection = Bisection(handler, window, self.test_runner)
        handler.set_window(bisection.window)
        if not bisection.window:
            LOG.info("No deployment between the good and the bad ones.")
            handler.finished()
            return Bisection.FINISHED

        result = self._bisect(bisection)
        if all(step.verdict == "s" for step in bisection.history):
            raise NoBadDeploymentFound(
                "All the %s were skipped, unable to find the first bad one."
                % _plural(len(bisection.history), "deployment")
            )
        handler.finished()
        return result

    def _bisect(self, bisection):
        while True:
            index = bisection.search_mid_point()
            verdict = bisection.evaluate(index)
            result = bisection.handle_verdict(index, verdict)
            if result != bisection.RUNNING:
                return result
