# umrah_core/render_info.py
import re

_BULLET = '•'
_BULLET_PREFIX = re.compile(r'^\s*•\s*')


def escape_html(text: str = '') -> str:
    return (text.replace('&', '&amp;')
                .replace('<', '&lt;')
                .replace('>', '&gt;')
                .replace('"', '&quot;')
                .replace("'", '&#39;'))


def _render_block(block: str) -> str:
    lines = [line for line in block.split('\n') if line.strip()]
    bullets = [line for line in lines if line.strip().startswith(_BULLET)]
    lead = ' '.join(line for line in lines if not line.strip().startswith(_BULLET))

    if not bullets:
        return f'<div class="translation text-accent mb-10">{escape_html(block)}</div>'

    lead_html = f'<div class="translation text-accent mb-10">{escape_html(lead)}</div>' if lead else ''
    items = ''.join(f'<li>{escape_html(_BULLET_PREFIX.sub("", b))}</li>' for b in bullets)
    return f'{lead_html}<ul class="dua-list">{items}</ul>'


def render_info_html(text: str = '') -> str:
    """Render an info-type translation for the page template.

    Blocks are separated by blank lines. A block with lines starting with
    '•' becomes an optional lead paragraph plus a dua-list; any other block
    stays a translation paragraph. All text is HTML-escaped.
    """
    return ''.join(_render_block(block) for block in text.split('\n\n'))
