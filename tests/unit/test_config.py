from __future__ import absolute_import

import os
import tempfile

import mozfile
import pytest

from deployregression.config import DEFAULTS, get_config, write_config
from deployregression.errors import DeployRegressionError


@pytest.fixture
def tmp():
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    mozfile.remove(temp_dir)


def test_get_config_defaults():
    assert get_config(None) == DEFAULTS
    assert get_config(None) is not DEFAULTS


def test_get_config(tmp):
    conf_path = os.path.join(tmp, "conf.cfg")
    with open(conf_path, "w") as f:
        f.write("token = abc\npage-delay = 0.2\n")
    config = get_config(conf_path)
    assert config["token"] == "abc"
    assert config["page-delay"] == "0.2"
    assert config["api-url"] == DEFAULTS["api-url"]


@pytest.mark.parametrize(
    "content",
    [
        # duplicate key
        "token = abc\ntoken = def\n",
        # not a key = value line
        "token = abc\nthis is not valid\n",
    ],
)
def test_get_erroneous_config(tmp, content):
    conf_path = os.path.join(tmp, "conf.cfg")
    with open(conf_path, "w") as f:
        f.write(content)
    with pytest.raises(DeployRegressionError) as ctx:
        get_config(conf_path)
    assert "Error while reading the config file" in str(ctx.value)


@pytest.mark.parametrize(
    "inputs,results",
    [
        (["tok", ""], {"token": "tok", "team": ""}),
        (["tok", "team_1"], {"token": "tok", "team": "team_1"}),
        (["", "NONE"], {"token": "", "team": ""}),
    ],
)
def test_write_config(tmp, mocker, inputs, results):
    mocked_input = mocker.patch("deployregression.config.input")
    mocked_input.side_effect = inputs
    conf_path = os.path.join(tmp, "subdir", "conf.cfg")
    write_config(conf_path)
    conf = get_config(conf_path)
    for key in results:
        assert conf[key] == results[key]
    with open(conf_path) as f:
        # ensure we have comments
        assert "# ------ deployregression configuration file ------" in f.read()


def test_write_existing_conf(tmp, mocker):
    mocked_input = mocker.patch("deployregression.config.input")
    mocked_input.return_value = "tok"
    conf_path = os.path.join(tmp, "conf.cfg")
    write_config(conf_path)
    results = get_config(conf_path)
    assert results["token"] == "tok"
    # write conf again
    mocked_input.reset_mock()
    write_config(conf_path)
    # nothing changed, nothing asked
    assert results == get_config(conf_path)
    assert not mocked_input.called
