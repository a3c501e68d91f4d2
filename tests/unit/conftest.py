from io import StringIO

import pytest

from deployregression.deployment import Deployment
from deployregression.log import init_logger

# 2020-06-01 00:00:00 UTC, in milliseconds
BASE_TIME = 1590969600000


@pytest.fixture(scope="session", autouse=True)
def logger():
    """proxy loggers need a default logger to be defined"""
    return init_logger(debug=True, allow_color=False, output=StringIO())


def api_deployment(index, project_id="prj_1", **kwargs):
    """json data of a deployment, the higher the index the newer"""
    data = {
        "uid": "dpl_%d" % index,
        "url": "app-%d.example.app" % index,
        "projectId": project_id,
        "ownerId": "team_1",
        "created": BASE_TIME + index * 60000,
        "target": "production",
        "state": "READY",
        "meta": {},
    }
    data.update(kwargs)
    return data


def create_deployment(index, **kwargs):
    return Deployment.from_api(api_deployment(index, **kwargs))


class WindowCreator(object):
    def create(self, size):
        """Returns *size* deployments, newest first"""
        return [create_deployment(i) for i in reversed(range(size))]


@pytest.fixture
def window_creator():
    return WindowCreator()
