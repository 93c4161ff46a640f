import json
import os
import tempfile
import unittest

from src.core import config
from src.core.storage import MemoryStorage
from src.editor.editor_session import CONFIRM_EXIT, CONFIRM_NEW, EditorSession, SessionState
from src.editor.level_store import LevelStore
from src.editor.palette import Direction
from src.editor.tile_map import LayerRole, TileMap


class FakeDialogs:
    def __init__(self):
        self.confirm_answers = []
        self.prompt_answers = []
        self.choose_answer = None
        self.confirmed = []
        self.prompted = []
        self.alerts = []

    def confirm(self, message):
        self.confirmed.append(message)
        return self.confirm_answers.pop(0) if self.confirm_answers else False

    def prompt(self, message, default=""):
        self.prompted.append((message, default))
        return self.prompt_answers.pop(0) if self.prompt_answers else None

    def alert(self, message):
        self.alerts.append(message)

    def choose(self, message, options):
        self.choices = list(options)
        return self.choose_answer


class FakeGameplay:
    def __init__(self):
        self.documents = []

    def test_custom_level(self, level_document):
        self.documents.append(level_document)


class FakeHost:
    def __init__(self):
        self.returned = 0

    def return_from_editor(self):
        self.returned += 1


class FakeHub:
    def __init__(self):
        self.subscribed = []

    def subscribe(self, listener):
        self.subscribed.append(listener)

    def unsubscribe(self, listener):
        self.subscribed.remove(listener)


class SessionTestCase(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.dialogs = FakeDialogs()
        self.gameplay = FakeGameplay()
        self.host = FakeHost()
        self.hub = FakeHub()
        self.session = EditorSession(
            LevelStore(self.storage, clock=lambda: "2024-05-01T12:00:00.000Z"),
            self.dialogs,
            self.gameplay,
            self.host,
            self.hub,
            viewport_size=(1000, 800),
        )
        self.session.show()

    def cell_center(self, x, y):
        sx, sy = self.session.mapper.to_screen(x, y)
        half = self.session.mapper.cell_size // 2
        return sx + half, sy + half

    def click(self, x, y):
        self.session.pointer_down(*self.cell_center(x, y))
        self.session.pointer_up()

    def make_playable(self):
        self.session.select_layer(LayerRole.ENTITIES)
        self.session.paint_cell(0, 0, config.PLAYER_TILE_ID)
        self.session.paint_cell(2, 2, config.BOX_TILE_ID)
        self.session.select_layer(LayerRole.GOALS)
        self.session.paint_cell(2, 2, config.GOAL_TILE_ID)


class TestLifecycle(SessionTestCase):
    def test_show_starts_clean_and_subscribes(self):
        self.assertEqual(self.session.state, SessionState.ACTIVE)
        self.assertEqual(self.hub.subscribed, [self.session])
        self.assertFalse(self.session.has_unsaved_changes)
        self.assertEqual(self.session.current_layer, LayerRole.TERRAIN)
        self.assertEqual(self.session.current_tile, 0)
        self.assertEqual(self.session.tile_map, TileMap.create_empty(16, 12))

    def test_hide_unsubscribes_and_ignores_input(self):
        self.session.hide()
        self.assertEqual(self.session.state, SessionState.INACTIVE)
        self.assertEqual(self.hub.subscribed, [])
        self.session.current_tile = 11
        self.session.pointer_down(*self.cell_center(1, 1))
        self.assertFalse(self.session.handle_action("toggle_grid"))
        self.assertEqual(self.session.tile_map.count(LayerRole.TERRAIN), 0)

    def test_show_again_discards_previous_map(self):
        self.session.paint_cell(1, 1, 11)
        self.session.hide()
        self.assertEqual(self.session.tile_map.get_tile(LayerRole.TERRAIN, 1, 1), 11)
        self.session.show()
        self.assertEqual(self.session.tile_map.count(LayerRole.TERRAIN), 0)
        self.assertEqual(self.hub.subscribed, [self.session])


class TestPointerEditing(SessionTestCase):
    def test_press_and_drag_paint_current_tile(self):
        self.session.select_tile(11)
        self.session.pointer_down(*self.cell_center(1, 1))
        self.session.pointer_move(*self.cell_center(2, 1))
        self.session.pointer_move(*self.cell_center(3, 1))
        self.session.pointer_up()
        self.session.pointer_move(*self.cell_center(4, 1))

        painted = self.session.tile_map.positions(LayerRole.TERRAIN, 11)
        self.assertEqual(painted, [(1, 1), (2, 1), (3, 1)])
        self.assertTrue(self.session.has_unsaved_changes)

    def test_off_grid_pointer_changes_nothing(self):
        self.session.select_tile(11)
        self.session.pointer_down(2, 2)
        self.assertEqual(self.session.tile_map.count(LayerRole.TERRAIN), 0)
        self.assertFalse(self.session.has_unsaved_changes)

    def test_rewriting_same_value_is_not_a_change(self):
        self.click(0, 0)
        self.assertFalse(self.session.has_unsaved_changes)

    def test_only_one_player_after_repeated_placements(self):
        self.session.select_layer(LayerRole.ENTITIES)
        self.session.select_tile(config.PLAYER_TILE_ID)
        for cell in ((0, 0), (5, 3), (7, 7), (5, 3)):
            self.click(*cell)
            self.assertEqual(
                self.session.tile_map.positions(LayerRole.ENTITIES, config.PLAYER_TILE_ID), [cell]
            )

    def test_player_over_box_is_flagged(self):
        self.session.select_layer(LayerRole.ENTITIES)
        self.session.paint_cell(4, 4, config.BOX_TILE_ID)
        self.session.paint_cell(4, 4, config.PLAYER_TILE_ID)
        self.assertEqual(self.session.tile_map.get_tile(LayerRole.ENTITIES, 4, 4), config.PLAYER_TILE_ID)
        self.assertIn("box", self.session.status_message)


class TestStrip(SessionTestCase):
    def test_layer_button_and_palette_cell(self):
        strip = self.session.strip
        entities_button = strip.layer_buttons[2]
        self.session.pointer_down(*entities_button.rect.center)
        self.assertEqual(self.session.current_layer, LayerRole.ENTITIES)

        box_cell = next(cell for cell in self.session.strip.cells if cell.tile_id == config.BOX_TILE_ID)
        self.session.pointer_down(*box_cell.rect.center)
        self.assertEqual(self.session.current_tile, config.BOX_TILE_ID)
        self.assertEqual(self.session.tile_map.count(LayerRole.ENTITIES), 0)

    def test_drag_into_strip_does_not_paint(self):
        self.session.select_tile(11)
        self.session.pointer_down(*self.cell_center(0, 0))
        self.session.pointer_move(200, 790)
        self.assertEqual(self.session.tile_map.count(LayerRole.TERRAIN), 1)

    def test_action_button_runs_command_without_starting_drag(self):
        grid_toggle_before = self.session.show_grid
        test_button = next(b for b in self.session.strip.action_buttons if b.value == "test_level")
        self.session.pointer_down(*test_button.rect.center)
        self.assertFalse(self.session.pointer_held)
        self.assertEqual(self.dialogs.alerts, ["Error: Level must have exactly one player position."])
        self.assertEqual(self.session.show_grid, grid_toggle_before)


class TestKeyboardCommands(SessionTestCase):
    def test_layer_keys_reset_tile(self):
        self.session.select_tile(11)
        self.assertTrue(self.session.handle_action("layer_goals"))
        self.assertEqual(self.session.current_layer, LayerRole.GOALS)
        self.assertEqual(self.session.current_tile, 0)
        self.assertEqual(self.session.palette, config.GOALS_PALETTE)

    def test_palette_arrows(self):
        self.session.handle_action("layer_entities")
        self.session.handle_action("palette_right")
        self.assertEqual(self.session.current_tile, config.BOX_TILE_ID)
        self.session.handle_action("palette_right")
        self.assertEqual(self.session.current_tile, config.PLAYER_TILE_ID)
        self.session.handle_action("palette_right")
        self.assertEqual(self.session.current_tile, config.PLAYER_TILE_ID)
        self.assertEqual(self.session.navigate_palette(Direction.LEFT), config.BOX_TILE_ID)

    def test_toggle_grid_and_unknown_action(self):
        self.assertTrue(self.session.handle_action("toggle_grid"))
        self.assertFalse(self.session.show_grid)
        self.assertFalse(self.session.handle_action("fly"))

    def test_relayout_tracks_viewport(self):
        self.session.relayout(640, 480)
        self.assertEqual(self.session.mapper.viewport_width, 640)
        self.assertEqual(self.session.strip.strip_top, 380)
        self.assertEqual(self.session.navigator.per_row, 3)


class TestTrialRun(SessionTestCase):
    def test_invalid_level_is_reported_not_launched(self):
        self.assertFalse(self.session.test_level())
        self.assertEqual(self.gameplay.documents, [])
        self.assertEqual(self.session.status_message, self.dialogs.alerts[-1])
        self.assertTrue(self.session.is_active)

    def test_valid_level_hands_over_a_copy(self):
        self.make_playable()
        self.assertTrue(self.session.handle_action("test_level"))
        document = self.gameplay.documents[0]
        self.assertEqual(document, self.session.tile_map.to_dict())
        document["layers"][0]["data"][0] = 99
        self.assertEqual(self.session.tile_map.get_tile(LayerRole.TERRAIN, 0, 0), 0)


class TestSave(SessionTestCase):
    def test_successful_save_clears_dirty_flag(self):
        self.make_playable()
        self.dialogs.prompt_answers = ["Level One"]
        level = self.session.save_level()
        self.assertEqual(level.level_name, "Level One")
        self.assertFalse(self.session.has_unsaved_changes)
        self.assertEqual(self.dialogs.alerts, ["Level saved successfully!"])
        self.assertEqual(self.dialogs.prompted[0][1], config.DEFAULT_LEVEL_NAME)
        self.assertEqual(len(json.loads(self.storage.get_item(config.CUSTOM_LEVELS_KEY))), 1)

    def test_cancelled_prompt_aborts_silently(self):
        self.make_playable()
        self.dialogs.prompt_answers = [None]
        self.assertIsNone(self.session.save_level())
        self.assertTrue(self.session.has_unsaved_changes)
        self.assertEqual(self.dialogs.alerts, [])
        self.assertIsNone(self.storage.get_item(config.CUSTOM_LEVELS_KEY))

    def test_blank_name_is_reported(self):
        self.make_playable()
        self.dialogs.prompt_answers = ["   "]
        self.assertIsNone(self.session.save_level())
        self.assertEqual(self.dialogs.alerts, ["A level name is required."])
        self.assertTrue(self.session.has_unsaved_changes)

    def test_invalid_level_never_prompts(self):
        self.session.select_layer(LayerRole.ENTITIES)
        self.session.paint_cell(0, 0, config.PLAYER_TILE_ID)
        self.session.paint_cell(1, 0, config.BOX_TILE_ID)
        self.assertIsNone(self.session.save_level())
        self.assertEqual(self.dialogs.prompted, [])
        self.assertEqual(
            self.dialogs.alerts, ["Error: Number of boxes (1) must match number of goals (0)."]
        )


class TestNewAndExit(SessionTestCase):
    def test_new_without_changes_skips_confirmation(self):
        self.assertTrue(self.session.new_level())
        self.assertEqual(self.dialogs.confirmed, [])

    def test_new_declined_keeps_map(self):
        self.session.paint_cell(1, 1, 11)
        self.dialogs.confirm_answers = [False]
        self.session.handle_action("new_level")
        self.assertEqual(self.dialogs.confirmed, [CONFIRM_NEW])
        self.assertEqual(self.session.tile_map.get_tile(LayerRole.TERRAIN, 1, 1), 11)
        self.assertTrue(self.session.has_unsaved_changes)

    def test_new_confirmed_resets_map(self):
        self.session.paint_cell(1, 1, 11)
        self.dialogs.confirm_answers = [True]
        self.assertTrue(self.session.new_level())
        self.assertEqual(self.session.tile_map.count(LayerRole.TERRAIN), 0)
        self.assertFalse(self.session.has_unsaved_changes)

    def test_exit_declined_stays_active(self):
        self.session.paint_cell(1, 1, 11)
        self.dialogs.confirm_answers = [False]
        self.assertFalse(self.session.exit_editor())
        self.assertTrue(self.session.is_active)
        self.assertEqual(self.host.returned, 0)
        self.assertEqual(self.dialogs.confirmed, [CONFIRM_EXIT])

    def test_exit_returns_to_host(self):
        self.assertTrue(self.session.handle_action("exit_editor"))
        self.assertEqual(self.session.state, SessionState.INACTIVE)
        self.assertEqual(self.hub.subscribed, [])
        self.assertEqual(self.host.returned, 1)


class TestLoadImportExport(SessionTestCase):
    def test_choose_saved_level_replaces_map(self):
        self.make_playable()
        self.dialogs.prompt_answers = ["Saved"]
        self.session.save_level()
        self.session.new_level()

        self.dialogs.choose_answer = 0
        self.assertTrue(self.session.handle_action("load_level"))
        self.assertEqual(self.dialogs.choices, ["Saved (Unknown)"])
        self.assertEqual(self.session.tile_map.count(LayerRole.ENTITIES), 2)
        self.assertFalse(self.session.has_unsaved_changes)

    def test_load_with_nothing_saved_is_reported(self):
        self.assertFalse(self.session.choose_saved_level())
        self.assertEqual(self.dialogs.alerts, ["No saved levels yet."])

    def test_export_then_import(self):
        self.session.paint_cell(3, 4, 12)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "level.json")
            self.assertTrue(self.session.export_level(path))
            self.assertTrue(self.session.has_unsaved_changes)
            exported = self.session.tile_map.clone()

            self.dialogs.confirm_answers = [True]
            self.session.paint_cell(0, 0, 11)
            self.assertTrue(self.session.import_level(path))
            self.assertEqual(self.session.tile_map, exported)
            self.assertFalse(self.session.has_unsaved_changes)

    def test_import_of_bad_file_is_reported(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "bad.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"width": 2}, f)
            self.assertFalse(self.session.import_level(path))
            self.assertFalse(self.session.import_level(os.path.join(tmpdir, "missing.json")))
            binary_path = os.path.join(tmpdir, "binary.json")
            with open(binary_path, "wb") as f:
                f.write(b"\xff\xfe\x00garbage")
            self.assertFalse(self.session.import_level(binary_path))
        self.assertEqual(len(self.dialogs.alerts), 3)
        self.assertTrue(all(alert.startswith("Could not import") for alert in self.dialogs.alerts))

    def test_import_prompt_cancel(self):
        self.dialogs.prompt_answers = [None]
        self.assertFalse(self.session.import_level())
        self.assertEqual(self.dialogs.confirmed, [])
        self.assertEqual(self.dialogs.alerts, [])


if __name__ == "__main__":
    unittest.main()
