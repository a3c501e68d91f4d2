# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
Access to the deployment history of a project, and representation of the
bisection history.
"""

import time
from collections import namedtuple

from mozlog import get_proxy_logger

from deployregression.deployment import Deployment
from deployregression.errors import EmptyHistoryError, HistoryMismatch

LOG = get_proxy_logger("History")

BisectionStep = namedtuple("BisectionStep", "window, index, verdict")


class BisectionHistory(list):
    """
    Hold the history of a bisection.

    This is basically a list of :class:`BisectionStep`, the top
    most step being the most recent.
    """

    def add(self, window, index, verdict):
        self.append(BisectionStep(window, index, verdict))


class DeploymentHistory(object):
    """
    Find the ready deployments of a project, newest first, using the
    paginated deployments API.

    :param client: a :class:`deployregression.network.ApiClient`
    :param project_id: the id of the project
    :param page_size: maximum number of deployments per request
    :param page_delay: seconds to wait between two page requests, to
                       not hit the API rate limits. 0 disables it.
    """

    def __init__(
        self,
        client,
        project_id,
        page_size=100,
        page_delay=1.0,
        target="production",
        state="READY",
        sleep=time.sleep,
    ):
        self.client = client
        self.project_id = project_id
        self.page_size = page_size
        self.page_delay = page_delay
        self.target = target
        self.state = state
        self._sleep = sleep

    def pages(self, until=None):
        """
        Lazily yield pages of :class:`Deployment`, newest first.

        The first request is limited to deployments created before *until*
        when given; each following request uses the creation time of the
        oldest deployment seen minus one, so there are no duplicates across
        pages.
        """
        while True:
            records, next_cursor = self.client.deployments(
                self.project_id,
                self.page_size,
                until=until,
                target=self.target,
                state=self.state,
            )
            page = [Deployment.from_api(r) for r in records]
            LOG.debug("Got %d deployments (until=%s)" % (len(page), until))
            yield page
            if not page or not next_cursor:
                return
            until = min(d.created for d in page) - 1
            if self.page_delay:
                self._sleep(self.page_delay)

    def _check_project(self, page):
        for deployment in page:
            if deployment.project_id not in (None, self.project_id):
                raise HistoryMismatch(
                    "Deployment %s belongs to project %s, not %s."
                    % (deployment.url, deployment.project_id, self.project_id)
                )

    def deployments(self, until=None, stop_at=None):
        """
        Returns the list of deployments, newest first.

        If *stop_at* is given (usually the good deployment), the list ends
        with it and no more pages are requested once it is found. Older
        deployments are never included.

        An :class:`EmptyHistoryError` is raised if the list is empty.
        """
        result = []
        for page in self.pages(until=until):
            self._check_project(page)
            found = False
            for deployment in page:
                if stop_at is not None:
                    if deployment == stop_at:
                        result.append(deployment)
                        found = True
                        break
                    if deployment.created < stop_at.created:
                        found = True
                        break
                result.append(deployment)
            if found:
                LOG.debug("Reached %s, stop fetching" % stop_at)
                break

        if not result:
            raise EmptyHistoryError(
                "Can not bisect because project %s does not have any"
                " %s deployments in this range." % (self.project_id, self.target)
            )
        return result
