# Copyright 2026 Martin Junius
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


import json

import pytest

from jsonconfig import JSONConfig
from eclclasses import Settings, Tier, DEFAULT_TIERS
from eclconfig import DEFAULTS, settings_from_config


def test_defaults_without_file():
    cfg = JSONConfig("no-such-eclipse-config.json", defaults=DEFAULTS, warn=False, err=False)
    assert cfg.configfile is None
    assert cfg.coarse_step == 2.0
    assert cfg.get("mag_levels") == [ 0.001, 0.2, 0.4, 0.6, 0.8 ]
    assert "tiers" in cfg.get_keys()
    with pytest.raises(AttributeError):
        cfg.no_such_key


def test_file_overrides_defaults(tmp_path):
    file = tmp_path / "eclipse-config.json"
    file.write_text(json.dumps({ "coarse_step": 4.0, "tiers": [ [ 3.0, 2.0 ] ], "extra": { "a": { "b": 1 } } }))
    cfg = JSONConfig(str(file), defaults=DEFAULTS, warn=False, err=False)
    assert cfg.configfile == str(file)
    assert cfg.coarse_step == 4.0
    assert cfg.umbra_tolerance == 0.1
    assert cfg.get("extra", "a", "b") == 1
    assert cfg.get("extra", "x", "b") is None

    settings = settings_from_config(cfg)
    assert settings.precision.coarse_step == pytest.approx(4/1440)
    assert settings.tiers == (Tier(3.0, 2/1440),)


def test_default_settings_match_config_defaults():
    cfg = JSONConfig("no-such-eclipse-config.json", defaults=DEFAULTS, warn=False, err=False)
    settings = settings_from_config(cfg)
    default = Settings()
    assert settings.precision.coarse_step == pytest.approx(default.precision.coarse_step)
    assert settings.precision.penumbra_tolerance == pytest.approx(default.precision.penumbra_tolerance)
    assert settings.precision.umbra_tolerance == pytest.approx(default.precision.umbra_tolerance)
    assert settings.limits_window == pytest.approx(default.limits_window)
    assert settings.max_line_interval == pytest.approx(default.max_line_interval)
    assert settings.mag_levels == default.mag_levels
    assert len(settings.tiers) == len(DEFAULT_TIERS)
    for t, d in zip(settings.tiers, DEFAULT_TIERS):
        assert t.grid_size == d.grid_size
        assert t.time_step == pytest.approx(d.time_step)


def test_write_json(tmp_path):
    cfg = JSONConfig("no-such-eclipse-config.json", defaults=DEFAULTS, warn=False, err=False)
    file = tmp_path / "out.json"
    cfg.write_json(str(file))
    assert json.loads(file.read_text()) == DEFAULTS
