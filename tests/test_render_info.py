import unittest

from umrah_core.render_info import escape_html, render_info_html


class RenderInfoTests(unittest.TestCase):

    def test_plain_paragraphs_stay_translations(self):
        html = render_info_html('Line one\n\nLine two')
        self.assertIn('translation text-accent', html)
        self.assertNotIn('<ul', html)
        self.assertEqual(html.count('<div'), 2)

    def test_bullets_become_dua_list_items(self):
        html = render_info_html('Lead sentence.\n• Bullet one\n• Bullet two')
        self.assertIn('<ul class="dua-list">', html)
        self.assertIn('<li>Bullet one</li>', html)
        self.assertIn('<li>Bullet two</li>', html)
        self.assertIn('Lead sentence.', html)

    def test_bullets_without_lead(self):
        html = render_info_html('• Only bullet')
        self.assertEqual(html, '<ul class="dua-list"><li>Only bullet</li></ul>')

    def test_text_is_escaped(self):
        html = render_info_html('<b>"Tawaf" & Sa\'i</b>\n• <i>x</i>')
        self.assertNotIn('<b>', html)
        self.assertIn('&lt;i&gt;x&lt;/i&gt;', html)
        self.assertIn('&quot;Tawaf&quot; &amp; Sa&#39;i', html)

    def test_escape_html(self):
        self.assertEqual(escape_html('a<b>&"\''), 'a&lt;b&gt;&amp;&quot;&#39;')
        self.assertEqual(escape_html(), '')


if __name__ == "__main__":
    unittest.main()
