"""Default files for a new assetlink project."""


def structure(name):
    """Default project structure."""
    return {
        name: {
            ".gitignore": gitignore,
            "assetlink.yml": assetlink_yml(name),
            "res": {
                "css": {"reset.css": reset_css, "style.css": style_css},
                "js": {"messages.en.js": messages_en_js},
                "views": {"index.html.jinja": index_html_jinja},
            },
        }
    }


gitignore = """\
# assetlink output
/assets/

# OS generated files
.DS_Store
Thumbs.db

# Artifacts
*.pyc
__pycache__
"""


assetlink_yml = """\
project_name: {0}
mounts:
  /{0}: res
output: assets/*
""".format


reset_css = """\
html, body {
  margin: 0;
  padding: 0;
}
"""


style_css = """\
body {
  font-family: sans-serif;
}
"""


messages_en_js = """\
var messages = {hello: "Hello!"};
"""


index_html_jinja = """\
<!doctype html>
<html>
<head>
{% stylesheets "../css/reset.css", "../css/style.css" %}
  <link href="{{ asset_url }}" rel="stylesheet">
{% endstylesheets %}
{% javascripts "../js/messages.{locale}.js" vars=["locale"] %}
  <script src="{{ asset_url }}"></script>
{% endjavascripts %}
</head>
<body></body>
</html>
"""
