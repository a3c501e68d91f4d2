# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""
Definition of deployregression related exceptions.
"""


class DeployRegressionError(Exception):
    """Base class for deployregression errors."""


class InvalidReference(DeployRegressionError):
    """
    Raised when a good or bad reference has no hostname.
    """

    def __init__(self, value, kind="deployment"):
        DeployRegressionError.__init__(
            self, "Invalid %s reference `%s`: no hostname provided" % (kind, value)
        )


class ReferenceResolutionFailed(DeployRegressionError):
    """
    Raised when a reference hostname does not match any deployment.
    """

    def __init__(self, hostname, kind="deployment"):
        DeployRegressionError.__init__(
            self, "Unable to find the %s deployment for `%s`" % (kind, hostname)
        )


class CrossProjectMismatch(DeployRegressionError):
    """
    Raised when the good and bad references belong to different projects.
    """


class OrderingViolation(DeployRegressionError):
    """
    Raised when the bad reference was created before the good one.
    """


class ProjectNotFound(DeployRegressionError):
    """
    Raised when the project to bisect can not be determined.
    """


class EmptyHistoryError(DeployRegressionError):
    """
    Raised when there are no deployments in the given range.
    """


class HistoryMismatch(DeployRegressionError):
    """
    Raised when the fetched history contains deployments of another project.
    """


class TestCommandError(DeployRegressionError):
    """
    Raised on a user test command error.
    """


class NoBadDeploymentFound(DeployRegressionError):
    """
    Raised when a bisection ends without any usable verdict.
    """
