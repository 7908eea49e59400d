"""
CSS variable injection.

StyleRoot stands in for a rendered document: the custom properties set on its
root element plus the <style> nodes it owns. inject_css_vars() applies a token
mapping to it; render_stylesheet() produces the same result as CSS text for
server-rendered pages.
"""
import logging

from .tokens import CSS_VARIABLES, CUSTOM_CSS_KEY

logger = logging.getLogger(__name__)

CUSTOM_CSS_NODE_ID = 'theme-custom-css'


class StyleNode:
    """A <style> element identified by id"""

    def __init__(self, node_id):
        self.id = node_id
        self.text_content = ''

    def __repr__(self):
        return f"<StyleNode id={self.id!r} chars={len(self.text_content)}>"


class StyleRoot:
    """Custom properties on the root element and the document's style nodes"""

    def __init__(self):
        self.properties = {}
        self.style_nodes = {}

    def set_property(self, name, value):
        self.properties[name] = value

    def get_property(self, name, default=None):
        return self.properties.get(name, default)

    def get_node(self, node_id):
        return self.style_nodes.get(node_id)

    def create_node(self, node_id):
        node = StyleNode(node_id)
        self.style_nodes[node_id] = node
        return node


def inject_css_vars(root, theme):
    """
    Apply a token mapping to a StyleRoot.

    Sets one custom property per mapped token, skipping empty values; a
    property set earlier is left in place when the new value is empty.
    The custom CSS token drives a single style node which is created on the
    first non-empty value, emptied when the token is cleared, and never
    removed.
    """
    for token, css_var in CSS_VARIABLES.items():
        value = theme.get(token)
        if value:
            root.set_property(css_var, value)

    custom_css = theme.get(CUSTOM_CSS_KEY)
    node = root.get_node(CUSTOM_CSS_NODE_ID)
    if custom_css:
        if node is None:
            node = root.create_node(CUSTOM_CSS_NODE_ID)
            logger.debug("Created custom CSS style node")
        node.text_content = custom_css
    elif node is not None:
        node.text_content = ''
    return root


def render_stylesheet(theme):
    """Render a token mapping as a `:root { ... }` block followed by the custom CSS"""
    lines = [':root {']
    for token, css_var in CSS_VARIABLES.items():
        value = theme.get(token)
        if value:
            lines.append(f"  {css_var}: {value};")
    lines.append('}')

    custom_css = theme.get(CUSTOM_CSS_KEY)
    if custom_css:
        lines.append('')
        lines.append(f"/* {CUSTOM_CSS_NODE_ID} */")
        lines.append(custom_css)
    return '\n'.join(lines) + '\n'
