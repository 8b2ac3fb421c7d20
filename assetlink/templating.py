"""Jinja2 integration.

RepositoryLoader loads templates from a repository, by absolute repository
path. AssetsExtension adds the asset tags:

    {% stylesheets "css/*.css", "/ns/css/print.css" filter="?min" %}
      <link href="{{ asset_url }}" rel="stylesheet">
    {% endstylesheets %}

Relative inputs are resolved against the directory of the template when it
was loaded by a RepositoryLoader.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from jinja2 import BaseLoader, Environment, TemplateNotFound, nodes
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context
from markupsafe import Markup

from assetlink import variables
from assetlink.errors import AssetError, MissingVariableError
from assetlink.factory import AssetFactory
from assetlink.repository import ResourceRepository
from assetlink.resource import ContentResource


class RepositoryLoader(BaseLoader):

    """Loads templates from a repository."""

    def __init__(self, repo: ResourceRepository, encoding: str = "utf-8"):
        self.repo = repo
        self.encoding = encoding

    def get_source(
        self, environment: Environment, template: str
    ) -> Tuple[str, Optional[str], Callable[[], bool]]:
        try:
            resource = self.repo.get(template)
        except (AssetError, ValueError) as ex:
            raise TemplateNotFound(template) from ex
        if not isinstance(resource, ContentResource):
            raise TemplateNotFound(template)
        source = resource.content.decode(self.encoding)
        mtime = resource.last_modified_at

        def uptodate() -> bool:
            try:
                return resource.last_modified_at == mtime
            except OSError:
                return False

        return source, resource.local_path, uptodate

    def list_templates(self) -> List[str]:
        return sorted(
            r.path for r in self.repo.find("/**") if isinstance(r, ContentResource)
        )


class AssetsExtension(Extension):

    """Provides the stylesheets, javascripts and image tags.

    Each tag takes comma-separated inputs followed by options:

        filter  comma-separated filter names
        output  target path pattern (default depends on the tag)
        name    asset name
        vars    list of variables, taken from the template context
        root    extra filesystem root
        debug   render the block once per input instead of once in total

    The block is rendered with asset_url set to the target path.
    """

    tags = {"stylesheets", "javascripts", "image"}

    outputs = {
        "stylesheets": "css/*.css",
        "javascripts": "js/*.js",
        "image": "images/*",
    }

    def __init__(self, environment: Environment):
        super().__init__(environment)
        environment.extend(asset_factory=None)

    def parse(self, parser: Parser) -> nodes.Node:
        token = next(parser.stream)
        tag = token.value
        inputs: List[nodes.Expr] = []
        options: Dict[str, nodes.Expr] = {}
        while parser.stream.current.type != "block_end":
            if inputs or options:
                parser.stream.skip_if("comma")
            if (
                parser.stream.current.type == "name"
                and parser.stream.look().type == "assign"
            ):
                key = next(parser.stream).value
                parser.stream.expect("assign")
                options[key] = parser.parse_expression()
            else:
                inputs.append(parser.parse_expression())
        body = parser.parse_statements((f"name:end{tag}",), drop_needle=True)

        filters = options.pop("filter", nodes.Const(""))
        options.setdefault("output", nodes.Const(self.outputs[tag]))
        args = [
            nodes.List(inputs),
            filters,
            nodes.Dict([nodes.Pair(nodes.Const(k), v) for k, v in options.items()]),
            nodes.Const(parser.name),
            nodes.ContextReference(),
        ]
        call = self.call_method("_render_assets", args)
        block = nodes.CallBlock(call, [nodes.Name("asset_url", "param")], [], body)
        return block.set_lineno(token.lineno)

    def _base_dir(self, template_name: Optional[str]) -> Optional[str]:
        if not isinstance(self.environment.loader, RepositoryLoader):
            return None
        if not template_name or not template_name.startswith("/"):
            return None
        return posixpath.dirname(template_name)

    def _render_assets(
        self,
        inputs: Sequence[str],
        filters: Union[str, Sequence[str]],
        options: Mapping[str, Any],
        template_name: Optional[str],
        context: Context,
        caller: Callable[..., str],
    ) -> str:
        factory: Optional[AssetFactory] = self.environment.asset_factory  # type: ignore
        if factory is None:
            raise AssetError("no asset factory is attached to the environment")
        if isinstance(filters, str):
            filters = [f.strip() for f in filters.split(",") if f.strip()]
        vars = list(options.get("vars", ()))
        values = {}
        for var in vars:
            if var not in context:
                raise MissingVariableError(var, template_name)
            values[var] = str(context[var])

        asset = factory.create_asset(inputs, filters, options)
        base_dir = self._base_dir(template_name)
        logging.debug("rendering assets %s in %s", list(inputs), base_dir)
        asset.supply_context(base_dir, values if vars else None)
        if options.get("debug", factory.debug):
            urls = [leaf.target_path for leaf in asset]
        else:
            urls = [asset.target_path]
        rendered = "".join(
            caller(asset_url=variables.resolve(url, vars, values))
            for url in urls
            if url is not None
        )
        if context.eval_ctx.autoescape:
            return Markup(rendered)
        return rendered


def asset_environment(
    repo: ResourceRepository, factory: AssetFactory, **kwargs: Any
) -> Environment:
    """Return an environment loading templates from repo, with asset tags."""
    env = Environment(
        loader=RepositoryLoader(repo),
        extensions=[AssetsExtension],
        **kwargs,
    )
    env.asset_factory = factory  # type: ignore
    return env
