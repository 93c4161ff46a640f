import unittest

import pygame

from src.core import config
from src.editor.editor_ui import ACTION_BUTTONS, Button, PaletteStripLayout, available_palette_width
from src.editor.tile_map import LayerRole


class TestPaletteStripLayout(unittest.TestCase):
    def setUp(self):
        self.layout = PaletteStripLayout(1000, 800, config.TERRAIN_PALETTE, per_row=12)

    def test_cells_are_laid_out_in_rows(self):
        first, second_row = self.layout.cells[0], self.layout.cells[12]
        self.assertEqual(first.rect, pygame.Rect(10, 710, 36, 36))
        self.assertEqual(second_row.rect, pygame.Rect(10, 750, 36, 36))
        self.assertEqual(len(self.layout.cells), len(config.TERRAIN_PALETTE))

    def test_rows_past_viewport_bottom_are_dropped(self):
        layout = PaletteStripLayout(1000, 800, config.TERRAIN_PALETTE, per_row=4)
        # Rows start at 710, 750, 790: the third would end below 800.
        self.assertEqual(len(layout.cells), 8)

    def test_buttons_sit_right_of_palette_area(self):
        self.assertEqual(available_palette_width(1000), 510)
        self.assertEqual([b.value for b in self.layout.layer_buttons], list(LayerRole))
        self.assertEqual([b.rect.x for b in self.layout.layer_buttons], [630, 750, 870])
        self.assertEqual([b.hint for b in self.layout.layer_buttons], ["[1]", "[2]", "[3]"])
        self.assertEqual([b.value for b in self.layout.action_buttons], [a for a, _ in ACTION_BUTTONS])
        self.assertEqual(self.layout.action_buttons[0].rect, pygame.Rect(510, 760, 110, 30))

    def test_hit_test_kinds(self):
        hit = self.layout.hit_test(self.layout.cells[5].rect.center)
        self.assertEqual((hit.kind, hit.value), ("tile", config.TERRAIN_PALETTE[5]))

        hit = self.layout.hit_test(self.layout.layer_buttons[1].rect.center)
        self.assertEqual((hit.kind, hit.value), ("layer", LayerRole.GOALS))

        hit = self.layout.hit_test((900.7, 775.2))
        self.assertEqual((hit.kind, hit.value), ("action", "exit_editor"))

    def test_hit_test_misses(self):
        self.assertIsNone(self.layout.hit_test((20, 500)))
        self.assertIsNone(self.layout.hit_test((505, 790)))
        self.assertIsNone(self.layout.hit_test((995, 705)))

    def test_narrow_viewport_has_no_palette_area(self):
        self.assertEqual(available_palette_width(300), 0)


class TestButton(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        pygame.font.init()

    @classmethod
    def tearDownClass(cls):
        pygame.font.quit()

    def test_draw_fills_active_color(self):
        surface = pygame.Surface((200, 100))
        font = pygame.font.Font(None, 18)
        button = Button((10, 10, 100, 30), "Goals", value=LayerRole.GOALS, hint="[2]")
        button.draw(surface, font, active=True, hint_font=font)
        self.assertEqual(surface.get_at((12, 12))[:3], config.BUTTON_ACTIVE_COLOR)
        self.assertTrue(button.collides((50, 20)))
        self.assertFalse(button.collides((5, 5)))


if __name__ == "__main__":
    unittest.main()
