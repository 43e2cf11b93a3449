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
Templates for the artifacts written into a build root.
"""
from jinja2 import Environment, StrictUndefined


def _dquote(value) -> str:
    """Escape a value for use inside a double-quoted Dockerfile string."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


# Root filesystems that can run the startup script as container init
DOCKERFILE = """\
FROM {{ base_image }}
{% if multi_layer %}
{% for pkg in packages %}
COPY {{ rootfs }}/hab/pkgs/{{ pkg }} /hab/pkgs/{{ pkg }}
{% endfor %}
{% endif %}
COPY {{ rootfs }} /
ENV {% for key, value in environment.items() %}{{ key }}="{{ value | dquote }}" {% endfor %}PATH="{{ path | dquote }}"
WORKDIR /
EXPOSE 9631 9638 {{ exposes }}
LABEL io.pkgexport.primary="{{ primary_svc_ident }}" io.pkgexport.installed="{{ installed_primary_svc_ident }}"
ENTRYPOINT ["/init.sh"]
CMD ["run", "{{ primary_svc_ident }}"]
"""

# Root filesystems that rely on the platform's native init
DOCKERFILE_NATIVE = """\
FROM {{ base_image }}
SHELL ["powershell", "-Command", "$ErrorActionPreference = 'Stop'; $ProgressPreference = 'SilentlyContinue';"]
{% if multi_layer %}
{% for pkg in packages %}
COPY {{ rootfs }}/hab/pkgs/{{ pkg }} /hab/pkgs/{{ pkg }}
{% endfor %}
{% endif %}
COPY {{ rootfs }} /
ENV {% for key, value in environment.items() %}{{ key }}="{{ value | dquote }}" {% endfor %}PATH="{{ path | dquote }}"
EXPOSE 9631 9638 {{ exposes }}
LABEL io.pkgexport.primary="{{ primary_svc_ident }}" io.pkgexport.installed="{{ installed_primary_svc_ident }}"
ENTRYPOINT ["{{ hab_path }}", "sup", "run"]
CMD ["{{ installed_primary_svc_ident }}"]
"""

INIT_SH = """\
#!{{ busybox_shell }}
set -e

export PATH="{{ path }}"

if [ "$#" -eq 0 ]; then
  set -- run {{ primary_svc_ident }}
fi

if [ "$1" = "sh" ]; then
  shift
  exec {{ busybox_shell }} "$@"
fi

exec {{ sup_bin }} "$@"
"""

BUILD_REPORT = """\
id={{ id }}
name={{ name }}
tags={{ tags }}
name_tags={{ name_tags }}
"""

_env = Environment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)
_env.filters["dquote"] = _dquote


def render(template: str, **context) -> str:
    """
    Render one of the templates above.

    Raises:
        jinja2.TemplateError: If the template is malformed or a variable is missing.
    """
    return _env.from_string(template).render(**context)
