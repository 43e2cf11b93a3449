# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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


"""
Runtime settings for the exporter, read from the environment.

A `.env` file in the working directory is loaded first; variables already
set in the process environment take precedence over it.
"""
import os
from typing import Mapping, Optional
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel

ENV_PREFIX = "PKGEXPORT_"

DEFAULT_DOCKER_CMD = "docker"


class ExportSettings(BaseModel):
    """
    Settings shared by the CLI and the engine wrapper.
    """
    docker_cmd: str = DEFAULT_DOCKER_CMD
    registry_url: Optional[str] = None
    registry_token: Optional[str] = None
    memory: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> "ExportSettings":
        """
        Build settings from PKGEXPORT_* variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
            dotenv: Whether to load a .env file into os.environ first.
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True), override=False)
            environ = os.environ

        values = {}
        for field in cls.model_fields:
            value = environ.get(ENV_PREFIX + field.upper())
            if value:
                values[field] = value
        return cls(**values)
