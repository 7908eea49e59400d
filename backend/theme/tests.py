"""
Test suite for the theme engine
Tests: token merge, presets, CSS injection, preview broadcasting, debounce, history, editor save flow, theme API
"""
import threading
import time
from unittest import mock

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.test_utils import TestDataFactory
from .broadcaster import PreviewFrame, PreviewMessage, THEME_PREVIEW
from .context import ThemeContext
from .editor import ThemeEditor
from .exceptions import GatewayError
from .gateway import SettingsGateway, resolve_upload_url
from .history import DraftHistory
from .injector import CUSTOM_CSS_NODE_ID, StyleRoot, inject_css_vars, render_stylesheet
from .presets import PRESETS, get_preset, merge_preset
from .scheduler import Debouncer
from .tokens import DEFAULT_THEME, PRESERVED_CONTENT_KEYS, dirty_keys, merge_settings, split_public_settings

ORIGIN = 'https://shop.example.com'


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    @property
    def live(self):
        return self.started and not self.cancelled and not self.fired

    def fire(self):
        self.fired = True
        self.function()


class FakeClock:
    """Timer factory that only fires when told to"""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    def live(self, interval=None):
        return [t for t in self.timers if t.live and (interval is None or t.interval == interval)]

    def fire(self, interval=None):
        timers = self.live(interval)
        for timer in timers:
            timer.fire()
        return len(timers)


def make_editor(records=None, gateway=None):
    clock = FakeClock()
    if gateway is None:
        gateway = mock.Mock()
        gateway.fetch_settings.return_value = records or []
        gateway.bulk_update.return_value = {'message': 'Settings saved', 'count': 1}
    editor = ThemeEditor(gateway, origin=ORIGIN, timer_factory=clock)
    return editor, gateway, clock


class TokenMergeTests(SimpleTestCase):

    def test_merge_keeps_defaults_without_override(self):
        """Every non-empty default survives when the backend has nothing for it"""
        merged = merge_settings([])
        for key, default in DEFAULT_THEME.items():
            if default:
                self.assertEqual(merged[key], default)

    def test_merge_ignores_empty_backend_values(self):
        merged = merge_settings([
            {'key': 'theme_accent_color', 'value': ''},
            {'key': 'theme_bg_color', 'value': None},
            {'key': 'theme_text_primary', 'value': '#eeeeee'},
        ])
        self.assertEqual(merged['theme_accent_color'], DEFAULT_THEME['theme_accent_color'])
        self.assertEqual(merged['theme_bg_color'], DEFAULT_THEME['theme_bg_color'])
        self.assertEqual(merged['theme_text_primary'], '#eeeeee')

    def test_merge_drops_unknown_keys(self):
        merged = merge_settings([{'key': 'theme_unknown', 'value': 'x'}, {'key': 'store_name', 'value': 'Shop'}])
        self.assertEqual(set(merged), set(DEFAULT_THEME))

    def test_split_public_settings(self):
        theme, other = split_public_settings([
            {'key': 'theme_accent_color', 'value': '#123456'},
            {'key': 'theme_logo', 'value': ''},
            {'key': 'store_name', 'value': 'Warung Forza'},
        ])
        self.assertEqual(theme['theme_accent_color'], '#123456')
        self.assertEqual(theme['theme_logo'], DEFAULT_THEME['theme_logo'])
        self.assertEqual(other, {'store_name': 'Warung Forza'})

    def test_dirty_keys(self):
        baseline = dict(DEFAULT_THEME)
        self.assertEqual(dirty_keys(dict(baseline), baseline), [])
        draft = {**baseline, 'theme_accent_color': '#000000'}
        self.assertEqual(dirty_keys(draft, baseline), ['theme_accent_color'])


class PresetTests(SimpleTestCase):

    def test_presets_never_touch_preserved_content(self):
        draft = dict(DEFAULT_THEME)
        draft.update({
            'theme_hero_title': 'My title',
            'theme_hero_subtitle': 'My subtitle',
            'theme_hero_image': '/uploads/hero.webp',
            'theme_logo': '/uploads/logo.webp',
            'theme_custom_css': '.x { color: red; }',
        })
        for preset in PRESETS:
            merged = merge_preset(draft, preset)
            for key in PRESERVED_CONTENT_KEYS:
                self.assertEqual(merged[key], draft[key], f"{preset.name} changed {key}")

    def test_preset_colors_win_over_draft(self):
        preset = get_preset('Ocean Deep')
        draft = {**DEFAULT_THEME, 'theme_accent_color': '#000000'}
        merged = merge_preset(draft, preset)
        self.assertEqual(merged['theme_accent_color'], '#0ea5e9')

    def test_get_preset_unknown(self):
        self.assertIsNone(get_preset('Nope'))


class InjectorTests(SimpleTestCase):

    def test_sets_css_variables_and_skips_empty(self):
        root = StyleRoot()
        inject_css_vars(root, {'theme_accent_color': '#111111', 'theme_bg_color': ''})
        self.assertEqual(root.get_property('--accent'), '#111111')
        self.assertIsNone(root.get_property('--bg'))

    def test_empty_value_leaves_previous_property(self):
        root = StyleRoot()
        inject_css_vars(root, {'theme_accent_color': '#111111'})
        inject_css_vars(root, {'theme_accent_color': ''})
        self.assertEqual(root.get_property('--accent'), '#111111')

    def test_custom_css_node_lifecycle(self):
        root = StyleRoot()
        inject_css_vars(root, {'theme_custom_css': ''})
        self.assertIsNone(root.get_node(CUSTOM_CSS_NODE_ID))

        inject_css_vars(root, {'theme_custom_css': 'body { margin: 0; }'})
        node = root.get_node(CUSTOM_CSS_NODE_ID)
        self.assertEqual(node.text_content, 'body { margin: 0; }')

        inject_css_vars(root, {'theme_custom_css': ''})
        self.assertIs(root.get_node(CUSTOM_CSS_NODE_ID), node)
        self.assertEqual(node.text_content, '')

    def test_render_stylesheet(self):
        css = render_stylesheet({'theme_accent_color': '#111111', 'theme_custom_css': 'a { color: red; }'})
        self.assertTrue(css.startswith(':root {'))
        self.assertIn('  --accent: #111111;', css)
        self.assertIn('a { color: red; }', css)


class BroadcasterTests(SimpleTestCase):

    def test_preview_frame_receives_theme(self):
        editor_ctx = ThemeContext(ORIGIN)
        preview_ctx = ThemeContext(ORIGIN)
        editor_ctx.broadcaster.register_frame(PreviewFrame(ORIGIN, receiver=preview_ctx))

        editor_ctx.update('theme_accent_color', '#222222')
        self.assertEqual(preview_ctx.theme['theme_accent_color'], '#222222')
        self.assertEqual(preview_ctx.root.get_property('--accent'), '#222222')

    def test_foreign_origin_frame_gets_nothing(self):
        editor_ctx = ThemeContext(ORIGIN)
        foreign_ctx = ThemeContext('https://evil.example.net')
        frame = editor_ctx.broadcaster.register_frame(PreviewFrame('https://evil.example.net', receiver=foreign_ctx))

        self.assertEqual(editor_ctx.broadcaster.broadcast({'theme_accent_color': '#333333'}), 0)
        self.assertEqual(frame.delivered, 0)
        self.assertEqual(foreign_ctx.theme['theme_accent_color'], DEFAULT_THEME['theme_accent_color'])

    def test_message_from_foreign_origin_rejected(self):
        ctx = ThemeContext(ORIGIN)
        message = PreviewMessage(theme={'theme_accent_color': '#444444'}).to_dict()
        with self.assertLogs('backend.theme.context', level='WARNING'):
            self.assertFalse(ctx.handle_message('https://evil.example.net', message))
        self.assertEqual(ctx.theme['theme_accent_color'], DEFAULT_THEME['theme_accent_color'])
        self.assertTrue(ctx.handle_message(ORIGIN, message))
        self.assertEqual(ctx.theme['theme_accent_color'], '#444444')

    def test_non_preview_messages_ignored(self):
        ctx = ThemeContext(ORIGIN)
        self.assertFalse(ctx.handle_message(ORIGIN, {'type': 'OTHER', 'theme': {}}))
        self.assertFalse(ctx.handle_message(ORIGIN, {'type': THEME_PREVIEW, 'theme': 'nope'}))
        self.assertFalse(ctx.handle_message(ORIGIN, 'THEME_PREVIEW'))

    def test_failing_frame_does_not_stop_broadcast(self):
        ctx = ThemeContext(ORIGIN)
        broken = mock.Mock()
        broken.post_message.side_effect = RuntimeError('gone')
        good = PreviewFrame(ORIGIN)
        ctx.broadcaster.register_frame(broken)
        ctx.broadcaster.register_frame(good)
        self.assertEqual(ctx.broadcaster.broadcast({'theme_accent_color': '#555555'}), 1)
        self.assertEqual(good.delivered, 1)


class DebouncerTests(SimpleTestCase):

    def test_last_schedule_wins(self):
        clock = FakeClock()
        calls = []
        debouncer = Debouncer(0.5, calls.append, timer_factory=clock)
        debouncer.schedule(1)
        debouncer.schedule(2)
        debouncer.schedule(3)
        self.assertEqual(len(clock.live()), 1)
        clock.fire()
        self.assertEqual(calls, [3])
        self.assertFalse(debouncer.pending)

    def test_flush_and_cancel(self):
        clock = FakeClock()
        calls = []
        debouncer = Debouncer(0.5, calls.append, timer_factory=clock)
        self.assertFalse(debouncer.flush())
        debouncer.schedule('a')
        self.assertTrue(debouncer.flush())
        self.assertEqual(calls, ['a'])

        debouncer.schedule('b')
        debouncer.cancel()
        self.assertEqual(clock.fire(), 0)
        self.assertEqual(calls, ['a'])

    def test_stale_timer_does_not_fire(self):
        clock = FakeClock()
        calls = []
        debouncer = Debouncer(0.5, calls.append, timer_factory=clock)
        debouncer.schedule('old')
        stale = clock.timers[0]
        debouncer.schedule('new')
        stale.function()
        self.assertEqual(calls, [])
        self.assertTrue(debouncer.pending)


class DraftHistoryTests(SimpleTestCase):

    def test_push_truncates_redo(self):
        history = DraftHistory({'a': 1})
        history.push({'a': 2})
        history.push({'a': 3})
        history.undo()
        history.undo()
        history.push({'a': 4})
        self.assertEqual(len(history), 2)
        self.assertFalse(history.can_redo)
        self.assertEqual(dict(history.current), {'a': 4})

    def test_boundaries(self):
        history = DraftHistory({'a': 1})
        self.assertIsNone(history.undo())
        self.assertIsNone(history.redo())

    def test_snapshots_are_read_only(self):
        history = DraftHistory({'a': 1})
        with self.assertRaises(TypeError):
            history.current['a'] = 2


class ThemeEditorTests(SimpleTestCase):

    def test_example_scenario(self):
        """Three quick edits give one history entry and a one-key save"""
        editor, gateway, clock = make_editor()
        editor.load()
        self.assertEqual(editor.draft['theme_accent_color'], '#e11d48')
        before = len(editor.history)

        for _ in range(3):
            editor.change('theme_accent_color', '#111111')
        clock.fire(0.5)

        self.assertEqual(len(editor.history), before + 1)
        self.assertEqual(editor.history.current['theme_accent_color'], '#111111')

        self.assertTrue(editor.save())
        gateway.bulk_update.assert_called_once_with([{'key': 'theme_accent_color', 'value': '#111111'}])
        self.assertEqual(editor.dirty_keys(), [])

    def test_edits_within_window_collapse(self):
        editor, _, clock = make_editor()
        editor.load()
        for value in ('#000001', '#000002', '#000003', '#000004'):
            editor.change('theme_accent_color', value)
        self.assertEqual(len(clock.live(0.5)), 1)
        clock.fire(0.5)
        self.assertEqual(len(editor.history), 2)

    def test_change_is_live_before_debounce(self):
        editor, _, _ = make_editor()
        editor.load()
        editor.change('theme_bg_color', '#101010')
        self.assertEqual(editor.context.root.get_property('--bg'), '#101010')

    def test_undo_redo_round_trip(self):
        editor, _, clock = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        clock.fire(0.5)
        editor.change('theme_accent_color', '#222222')
        clock.fire(0.5)

        before = dict(editor.draft)
        editor.undo()
        self.assertEqual(editor.draft['theme_accent_color'], '#111111')
        editor.redo()
        self.assertEqual(editor.draft, before)

    def test_undo_flushes_pending_edit(self):
        editor, _, _ = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        editor.undo()
        self.assertEqual(editor.draft['theme_accent_color'], '#e11d48')
        editor.redo()
        self.assertEqual(editor.draft['theme_accent_color'], '#111111')

    def test_undo_at_start_is_noop(self):
        editor, _, _ = make_editor()
        editor.load()
        self.assertIsNone(editor.undo())
        self.assertIsNone(editor.redo())

    def test_apply_preset_single_step(self):
        editor, _, clock = make_editor()
        editor.load()
        editor.change('theme_hero_title', 'Custom title')
        editor.apply_preset('Forest Dark')
        self.assertEqual(clock.live(0.5), [])
        self.assertEqual(len(editor.history), 2)
        self.assertEqual(editor.draft['theme_accent_color'], '#10b981')
        self.assertEqual(editor.draft['theme_hero_title'], 'Custom title')

    def test_apply_unknown_preset(self):
        editor, _, _ = make_editor()
        with self.assertRaises(ValueError):
            editor.apply_preset('Nope')

    def test_save_without_changes_makes_no_request(self):
        editor, gateway, _ = make_editor()
        editor.load()
        self.assertFalse(editor.save())
        gateway.bulk_update.assert_not_called()
        self.assertEqual(editor.status, ThemeEditor.IDLE)

    def test_save_failure_keeps_baseline(self):
        editor, gateway, _ = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        gateway.bulk_update.side_effect = GatewayError('Server error', status_code=500)

        self.assertFalse(editor.save())
        self.assertEqual(editor.status, ThemeEditor.ERROR)
        self.assertEqual(editor.message, 'Server error')
        self.assertEqual(editor.dirty_keys(), ['theme_accent_color'])

        gateway.bulk_update.side_effect = None
        self.assertTrue(editor.save())
        self.assertEqual(editor.dirty_keys(), [])

    def test_saved_indicator_clears(self):
        editor, _, clock = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        editor.save()
        self.assertEqual(editor.status, ThemeEditor.SAVED)
        clock.fire(3)
        self.assertEqual(editor.status, ThemeEditor.IDLE)

    def test_load_uses_stored_values(self):
        editor, _, _ = make_editor(records=[{'key': 'theme_accent_color', 'value': '#abcdef'}])
        editor.load()
        self.assertEqual(editor.baseline['theme_accent_color'], '#abcdef')
        self.assertFalse(editor.is_dirty)

    def test_load_failure_falls_back_to_defaults(self):
        gateway = mock.Mock()
        gateway.fetch_settings.side_effect = GatewayError('offline')
        editor, _, _ = make_editor(gateway=gateway)
        with self.assertLogs('backend.theme.editor', level='ERROR'):
            merged = editor.load()
        self.assertEqual(merged, DEFAULT_THEME)

    def test_late_load_after_close_is_discarded(self):
        gateway = mock.Mock()
        editor, _, _ = make_editor(gateway=gateway)

        def slow_fetch():
            editor.close()
            return [{'key': 'theme_accent_color', 'value': '#abcdef'}]

        gateway.fetch_settings.side_effect = slow_fetch
        self.assertIsNone(editor.load())
        self.assertEqual(editor.draft['theme_accent_color'], DEFAULT_THEME['theme_accent_color'])

    def test_close_cancels_pending_push(self):
        editor, _, clock = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        editor.close()
        self.assertEqual(clock.live(), [])

    def test_upload_image_sets_token(self):
        gateway = mock.Mock()
        gateway.fetch_settings.return_value = []
        gateway.upload_image.return_value = '/uploads/1_logo.webp'
        gateway.resolve_upload_url.return_value = 'https://cdn.example.com/uploads/1_logo.webp'
        editor, _, _ = make_editor(gateway=gateway)
        editor.load()
        url = editor.upload_image('theme_logo', b'data', filename='logo.png')
        self.assertEqual(url, 'https://cdn.example.com/uploads/1_logo.webp')
        self.assertEqual(editor.draft['theme_logo'], '/uploads/1_logo.webp')

    def test_upload_without_path_leaves_draft(self):
        gateway = mock.Mock()
        gateway.fetch_settings.return_value = []
        gateway.upload_image.return_value = ''
        editor, _, clock = make_editor(gateway=gateway)
        editor.load()
        with self.assertLogs('backend.theme.editor', level='WARNING'):
            self.assertEqual(editor.upload_image('theme_logo', b'data', filename='logo.png'), '')
        self.assertEqual(editor.draft['theme_logo'], DEFAULT_THEME['theme_logo'])
        self.assertEqual(clock.live(), [])

    def test_editor_actions_reach_preview_frame(self):
        editor, _, clock = make_editor()
        preview = ThemeContext(ORIGIN)
        editor.context.broadcaster.register_frame(PreviewFrame(ORIGIN, receiver=preview))
        editor.load()

        editor.change('theme_accent_color', '#111111')
        self.assertEqual(preview.theme['theme_accent_color'], '#111111')
        self.assertEqual(preview.root.get_property('--accent'), '#111111')
        clock.fire(0.5)

        editor.undo()
        self.assertEqual(preview.theme['theme_accent_color'], '#e11d48')
        self.assertEqual(preview.root.get_property('--accent'), '#e11d48')

        editor.redo()
        self.assertEqual(preview.theme['theme_accent_color'], '#111111')

        editor.apply_preset('Forest Dark')
        self.assertEqual(preview.theme['theme_accent_color'], '#10b981')
        self.assertEqual(preview.root.get_property('--accent'), '#10b981')

        editor.reset_to_defaults()
        self.assertEqual(preview.theme, editor.draft)

    def test_push_waiting_on_lock_during_undo(self):
        """A debounced push that fired while undo() held the lock is recorded once, before the undo"""
        editor, _, clock = make_editor()
        editor.load()
        editor.change('theme_accent_color', '#111111')
        clock.fire(0.5)
        editor.change('theme_accent_color', '#222222')
        timer = clock.live(0.5)[0]

        with editor._lock:
            worker = threading.Thread(target=timer.fire)
            worker.start()
            deadline = time.monotonic() + 5
            while editor._history_push.pending and time.monotonic() < deadline:
                time.sleep(0.01)
            self.assertFalse(editor._history_push.pending)
            editor.undo()
        worker.join(5)
        self.assertFalse(worker.is_alive())

        self.assertEqual(len(editor.history), 3)
        self.assertEqual(editor.draft['theme_accent_color'], '#111111')
        self.assertTrue(editor.can_redo)
        editor.redo()
        self.assertEqual(editor.draft['theme_accent_color'], '#222222')
        editor.undo()
        editor.undo()
        self.assertEqual(editor.draft['theme_accent_color'], '#e11d48')


class SettingsGatewayTests(SimpleTestCase):

    def make_response(self, status_code=200, json_data=None, text=''):
        response = mock.Mock()
        response.status_code = status_code
        response.json.return_value = json_data
        response.text = text
        response.reason = ''
        return response

    def test_bulk_update_posts_items(self):
        session = mock.Mock()
        session.headers = {}
        session.request.return_value = self.make_response(json_data={'count': 1})
        gateway = SettingsGateway('http://api.test/api/v1/', token='abc', session=session)

        gateway.bulk_update([{'key': 'theme_logo', 'value': '/x.png'}])
        session.request.assert_called_once_with(
            'POST', 'http://api.test/api/v1/settings/bulk/',
            json=[{'key': 'theme_logo', 'value': '/x.png'}], timeout=10,
        )
        self.assertEqual(session.headers['Authorization'], 'Bearer abc')

    def test_http_error_raises(self):
        session = mock.Mock()
        session.headers = {}
        session.request.return_value = self.make_response(400, {'error': 'Expected a list of settings'})
        gateway = SettingsGateway('http://api.test/api/v1', session=session)
        with self.assertRaises(GatewayError) as ctx:
            gateway.bulk_update([])
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, 'Expected a list of settings')

    def test_network_error_raises(self):
        import requests

        session = mock.Mock()
        session.headers = {}
        session.request.side_effect = requests.exceptions.ConnectionError('refused')
        gateway = SettingsGateway('http://api.test/api/v1', session=session)
        with self.assertRaises(GatewayError) as ctx:
            gateway.fetch_settings()
        self.assertIsNone(ctx.exception.status_code)

    @override_settings(API_BASE_URL='https://api.shop.test/api/v1', UPLOAD_BASE_URL='https://cdn.shop.test')
    def test_from_settings(self):
        gateway = SettingsGateway.from_settings(token='abc', session=mock.Mock(headers={}))
        self.assertEqual(gateway.base_url, 'https://api.shop.test/api/v1')
        self.assertEqual(gateway.session.headers['Authorization'], 'Bearer abc')
        self.assertEqual(gateway.resolve_upload_url('/uploads/a.webp'), 'https://cdn.shop.test/uploads/a.webp')

    def test_resolve_upload_url(self):
        self.assertEqual(resolve_upload_url('/uploads/a.webp', 'https://cdn.test/'), 'https://cdn.test/uploads/a.webp')
        self.assertEqual(resolve_upload_url('https://x.test/a.png', 'https://cdn.test'), 'https://x.test/a.png')
        self.assertEqual(resolve_upload_url('', 'https://cdn.test'), '')


class ThemeAPITests(TestCase):
    """Test theme endpoints"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_theme_detail_merges_stored_values(self):
        TestDataFactory.create_setting('theme_accent_color', '#0000ff', group='theme')
        TestDataFactory.create_setting('theme_bg_color', '', group='theme')
        response = self.client.get('/api/v1/theme/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['theme_accent_color'], '#0000ff')
        self.assertEqual(response.data['theme_bg_color'], DEFAULT_THEME['theme_bg_color'])

    def test_preset_list(self):
        response = self.client.get('/api/v1/theme/presets/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['presets']), len(PRESETS))
        self.assertIn('font_options', response.data)

    def test_stylesheet(self):
        TestDataFactory.create_setting('theme_accent_color', '#0000ff', group='theme')
        response = self.client.get('/api/v1/theme/stylesheet.css')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/css'))
        self.assertIn(b'--accent: #0000ff;', response.content)

    def test_stylesheet_with_css_accept_header(self):
        TestDataFactory.create_setting('theme_accent_color', '#0000ff', group='theme')
        response = self.client.get('/api/v1/theme/stylesheet.css', HTTP_ACCEPT='text/css')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/css'))
        self.assertIn(b'--accent: #0000ff;', response.content)

    def test_stylesheet_rejects_post(self):
        response = self.client.post('/api/v1/theme/stylesheet.css')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
