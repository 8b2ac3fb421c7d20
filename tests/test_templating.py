import re

import pytest
from jinja2 import DictLoader, Environment, TemplateNotFound

from assetlink.errors import AssetError, MissingVariableError
from assetlink.filters import CallbackFilter, FilterManager
from assetlink.templating import AssetsExtension, asset_environment

VIEWS = "/webmozart/puli/views"
LINK = re.compile(r'<link href="css/([a-z0-9]{7})\.css" rel="stylesheet" media="screen" />')


@pytest.fixture
def env(repo, factory):
    return asset_environment(repo, factory)


def render(env, name, **context):
    return env.get_template(f"{VIEWS}/{name}.html.jinja").render(**context)


def rendered_name(env, name, **context):
    match = LINK.search(render(env, name, **context))
    assert match, f"no stylesheet link in {name}"
    return match.group(1)


def test_same_file_gets_same_url(env):
    absolute = rendered_name(env, "stylesheet-absolute")
    relative = rendered_name(env, "stylesheet-relative")
    relative_to_root = rendered_name(env, "stylesheet-relative-to-root")

    assert absolute == relative == relative_to_root


def test_custom_name(env):
    output = render(env, "stylesheet-custom-name")

    assert output.strip() == '<link href="css/style.css" rel="stylesheet" media="screen" />'


def test_custom_output(env):
    output = render(env, "stylesheet-custom-output")

    assert 'href="css/puli/style.css"' in output


def test_multiple_inputs(env):
    links = LINK.findall(render(env, "stylesheet-multiple"))

    assert len(links) == 1
    assert links[0] != rendered_name(env, "stylesheet-relative")


def test_multiple_inputs_in_debug_mode(repo, factory):
    factory.debug = True
    output = render(asset_environment(repo, factory), "stylesheet-multiple")
    hrefs = re.findall(r'href="([^"]+)"', output)

    assert len(hrefs) == 2
    name = hrefs[0].split("/")[1].split("_")[0]
    assert hrefs == [f"css/{name}_style_1.css", f"css/{name}_reset_2.css"]


def test_filters(env, factory):
    factory.filter_manager = FilterManager()
    factory.filter_manager.set("banner", CallbackFilter())
    factory.filter_manager.set("minify", CallbackFilter())

    with_filters = rendered_name(env, "stylesheet-filters")

    assert with_filters != rendered_name(env, "stylesheet-relative")


def test_filters_need_a_filter_manager(env):
    with pytest.raises(AssetError):
        render(env, "stylesheet-filters")


def test_variables_are_taken_from_the_context(env):
    output = render(env, "javascript-variables", locale="en")

    assert re.fullmatch(r'<script src="js/[a-z0-9]{7}\.en\.js"></script>\s*', output)


def test_missing_variable(env):
    with pytest.raises(MissingVariableError) as info:
        render(env, "javascript-variables")
    assert info.value.variable == "locale"


def test_images(env):
    assert re.search(r'src="images/[a-z0-9]{7}\.gif"', render(env, "image-absolute"))
    assert 'src="images/banana.gif"' in render(env, "image-custom-name")


def test_template_outside_of_repository(repo, factory, env):
    source = '{% stylesheets "css/style.css" %}{{ asset_url }}{% endstylesheets %}'
    other = Environment(loader=DictLoader({"page.html": source}), extensions=[AssetsExtension])
    other.asset_factory = factory

    output = other.get_template("page.html").render()

    assert output == f"css/{rendered_name(env, 'stylesheet-relative-to-root')}.css"


def test_environment_without_factory():
    source = '{% stylesheets "css/style.css" %}{{ asset_url }}{% endstylesheets %}'
    env = Environment(loader=DictLoader({"page.html": source}), extensions=[AssetsExtension])

    with pytest.raises(AssetError):
        env.get_template("page.html").render()


def test_autoescape_keeps_markup(repo, factory):
    env = asset_environment(repo, factory, autoescape=True)

    assert "&lt;" not in render(env, "stylesheet-custom-name")


def test_loader(env):
    assert f"{VIEWS}/stylesheet-relative.html.jinja" in env.list_templates()
    with pytest.raises(TemplateNotFound):
        env.get_template(f"{VIEWS}/missing.html.jinja")
    with pytest.raises(TemplateNotFound):
        env.get_template(VIEWS)
    with pytest.raises(TemplateNotFound):
        env.get_template("views/stylesheet-relative.html.jinja")


def test_variable_set_to_none_is_not_missing(env):
    output = render(env, "javascript-variables", locale=None)

    assert re.search(r'src="js/[a-z0-9]{7}\.None\.js"', output)
