# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
Resolution of the user supplied good and bad references (deployment urls or
hostnames) into :class:`Reference` objects.
"""

import threading
from collections import namedtuple
from urllib.parse import urlparse

from mozlog import get_proxy_logger

from deployregression.deployment import Deployment
from deployregression.errors import (
    CrossProjectMismatch,
    InvalidReference,
    OrderingViolation,
    ReferenceResolutionFailed,
)

LOG = get_proxy_logger("References")


def parse_reference(value, kind="deployment"):
    """
    Returns a couple (hostname, path) from a deployment url or hostname.

    The path is None when the url does not have one.
    """
    if not value.startswith("https://"):
        value = "https://%s" % value
    parsed = urlparse(value)
    if not parsed.hostname:
        raise InvalidReference(value, kind)
    path = parsed.path
    if parsed.query:
        path += "?" + parsed.query
    if path in ("", "/"):
        path = None
    return parsed.hostname, path


class Reference(namedtuple("Reference", "hostname, deployment, path")):
    """
    A resolved good or bad endpoint of the bisection.
    """

    __slots__ = ()

    @property
    def created(self):
        return self.deployment.created

    @property
    def project_id(self):
        return self.deployment.project_id

    @property
    def owner_id(self):
        return self.deployment.owner_id


class ResolvePromise(object):
    """
    A promise to get a resolved reference.

    The resolution is started in a thread; calling the promise waits for it
    and returns the reference, or raises the resolution error.
    """

    def __init__(self, callback, *args):
        self.result = None
        self.error = None
        self.thread = threading.Thread(target=self._run, args=(callback,) + args)
        self.thread.daemon = True
        self.thread.start()

    def _run(self, callback, *args):
        try:
            self.result = callback(*args)
        except Exception as exc:
            self.error = exc

    def __call__(self):
        while self.thread.is_alive():
            self.thread.join(0.1)
        if self.error is not None:
            raise self.error
        return self.result


class ReferenceResolver(object):
    """
    Resolve references against the remote store, using an
    :class:`deployregression.network.ApiClient`.
    """

    def __init__(self, client):
        self.client = client

    def resolve(self, value, kind="deployment"):
        hostname, path = parse_reference(value, kind)
        data = self.client.deployment(hostname)
        if not data:
            raise ReferenceResolutionFailed(hostname, kind)
        deployment = Deployment.from_api(data)
        LOG.debug("Resolved %s reference %s to %r" % (kind, hostname, deployment))
        return Reference(hostname, deployment, path)

    def _start(self, value, kind):
        if not value:
            return lambda: None
        return ResolvePromise(self.resolve, value, kind)

    def resolve_range(self, good, bad, path=None):
        """
        Resolve the good and bad references concurrently and check them.

        *good* and *bad* may be None if not given. Returns a tuple
        (good_ref, bad_ref, path) where path is the subpath to test.
        """
        # parsing errors must be raised before any lookup starts
        for value, kind in ((bad, "bad"), (good, "good")):
            if value:
                parse_reference(value, kind)
        bad_promise = self._start(bad, "bad")
        good_promise = self._start(good, "good")
        bad_ref = bad_promise()
        good_ref = good_promise()

        if good_ref and bad_ref:
            if good_ref.project_id != bad_ref.project_id:
                raise CrossProjectMismatch(
                    "Good deployment %s (project %s) and bad deployment %s"
                    " (project %s) do not belong to the same project."
                    % (good_ref.hostname, good_ref.project_id,
                       bad_ref.hostname, bad_ref.project_id)
                )
            if bad_ref.created < good_ref.created:
                raise OrderingViolation(
                    "Bad deployment %s was created before good deployment %s."
                    " Unable to bisect backward."
                    % (bad_ref.deployment.describe(), good_ref.deployment.describe())
                )
        return good_ref, bad_ref, self._choose_path(good_ref, bad_ref, path)

    def _choose_path(self, good_ref, bad_ref, path):
        if bad_ref and bad_ref.path:
            if path and path != bad_ref.path:
                LOG.info(
                    "Ignoring subpath %s in favor of `--path` argument %s"
                    % (bad_ref.path, path)
                )
            else:
                path = bad_ref.path
        if good_ref and good_ref.path:
            if path and path != good_ref.path:
                LOG.info(
                    "Ignoring subpath %s which does not match %s" % (good_ref.path, path)
                )
            elif not path:
                path = good_ref.path
        return path
