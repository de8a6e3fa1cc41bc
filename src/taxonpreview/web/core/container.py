"""Dependency injection container for the taxonpreview web application."""

from dependency_injector import containers, providers
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.system.path_resolver import PathResolver
from taxonpreview.web.core.config import get_config
from taxonpreview.wiring.links import LinkInjector


def create_template_environment(resolver: PathResolver) -> Environment:
    """Create the popup template environment with strict undefined handling."""
    return Environment(
        loader=FileSystemLoader(str(resolver.get_templates_dir())),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    The HTTP source client is a singleton so all requests share one connection
    pool; it is started and stopped by the application lifespan.
    """

    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        get_config,
        path_resolver=path_resolver,
    )

    templates = providers.Singleton(
        create_template_environment,
        resolver=path_resolver,
    )

    source_client = providers.Singleton(
        ReferenceSourceClient,
        endpoints=config.provided.sources,
    )

    link_injector = providers.Singleton(
        LinkInjector,
        endpoints=config.provided.sources,
    )
