# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import importlib
import logging
import os
from functools import cache

from ivo.conf.settings import IvoSettings

logger = logging.getLogger(__name__)

CONFIG_MODULE_ENV_VAR = 'IVO_CONFIG_MODULE'
DEFAULT_CONFIG_MODULE = 'ivo.conf.ivo_sale'


def load_settings(module_path: str) -> IvoSettings:
    """Import `module_path` and return its `SETTINGS` object."""
    module = importlib.import_module(module_path)
    settings = getattr(module, 'SETTINGS', None)
    if not isinstance(settings, IvoSettings):
        raise TypeError(f'{module_path}.SETTINGS must be an IvoSettings instance')
    return settings


@cache
def get_global_settings() -> IvoSettings:
    """Return the settings of this process, loaded once.

    The module is taken from the IVO_CONFIG_MODULE environment variable and
    defaults to `ivo.conf.ivo_sale`.
    """
    module_path = os.environ.get(CONFIG_MODULE_ENV_VAR, DEFAULT_CONFIG_MODULE)
    settings = load_settings(module_path)
    logger.debug('loaded settings %s from %s', settings.NETWORK_NAME, module_path)
    return settings
