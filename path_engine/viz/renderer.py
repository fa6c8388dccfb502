import threading

import pygame

from path_engine.algo.search import HamiltonianSearch
from path_engine.core.grid import Grid


class Renderer:
    COLOR_BG = (10, 10, 10)
    COLOR_LINE = (60, 60, 60)
    COLORS = {
        Grid.EMPTY: (200, 200, 200),
        Grid.BLOCKED: (40, 40, 40),
        Grid.SOURCE: (60, 160, 60),  # Green
        Grid.SINK: (255, 215, 0),    # Gold
    }

    def __init__(self, grid: Grid, search: HamiltonianSearch = None, width=800, height=600):
        self.grid = grid
        self.screen_width = width
        self.screen_height = height

        # The window owns the cancel signal; closing it stops the search
        self.cancel = threading.Event()
        self.search = search or HamiltonianSearch(grid)
        self.search.cancel = self.cancel
        self.user_progress = self.search.on_progress
        self.search.on_progress = self.on_progress

        self.last_progress = (0, 0.0)
        self.result = None
        self.worker = None

        self.cell_size = 20.0
        self.offset_x = 0.0
        self.offset_y = 0.0

        self.font = None
        self.running = True
        self.clock = None
        self.surface = None

    def fit_to_screen(self):
        """Auto-adjust cell size to fit the entire grid on screen, below the HUD."""
        padding = 40
        hud = 100
        available_w = self.screen_width - (padding * 2)
        available_h = self.screen_height - (padding * 2) - hud

        self.cell_size = max(1.0, min(available_w / self.grid.width, available_h / self.grid.height))

        total_w = self.grid.width * self.cell_size
        total_h = self.grid.height * self.cell_size
        self.offset_x = (self.screen_width - total_w) / 2
        self.offset_y = hud + (self.screen_height - hud - total_h) / 2

    def init_window(self, headless=False):
        pygame.init()
        if headless:
            self.surface = pygame.Surface((self.screen_width, self.screen_height))
        else:
            pygame.display.set_caption(f"Path Engine - {self.grid.width}x{self.grid.height}")
            self.surface = pygame.display.set_mode((self.screen_width, self.screen_height), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("Consolas", 16)
        self.fit_to_screen()

    def on_progress(self, count: int, elapsed: float):
        # Called from the worker thread; a tuple swap is atomic enough for display
        self.last_progress = (count, elapsed)
        if self.user_progress:
            self.user_progress(count, elapsed)

    def start_search(self):
        def work():
            self.result = self.search.run()

        self.worker = threading.Thread(target=work, name="path-search", daemon=True)
        self.worker.start()

    def handle_input(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.type == pygame.VIDEORESIZE:
                self.screen_width, self.screen_height = event.w, event.h
                self.fit_to_screen()

    def draw_grid(self):
        self.surface.fill(self.COLOR_BG)
        size = int(self.cell_size)

        for r in range(self.grid.height):
            for c in range(self.grid.width):
                kind = self.grid.cell_kind(r, c)
                px = int(c * self.cell_size + self.offset_x)
                py = int(r * self.cell_size + self.offset_y)
                pygame.draw.rect(self.surface, self.COLORS[kind], (px, py, size, size))
                if size > 4:
                    pygame.draw.rect(self.surface, self.COLOR_LINE, (px, py, size, size), 1)

    def hud_lines(self):
        if self.result is not None:
            status = "Cancelled" if self.result.cancelled else "Done"
            count, elapsed = self.result.count, self.result.elapsed
        else:
            status = "Running" if self.worker else "Idle"
            count = self.search.count
            elapsed = self.search.elapsed() if self.worker else 0.0
        return [
            f"Size: {self.grid.width}x{self.grid.height} ({self.grid.empty_count} empty)",
            f"Paths: {count:,}",
            f"Nodes: {self.search.nodes:,}  Pruned: {self.search.pruned:,}",
            f"Time: {elapsed:.2f}s  Status: {status}",
        ]

    def draw_hud(self):
        for i, text in enumerate(self.hud_lines()):
            lbl = self.font.render(text, True, (255, 255, 255))
            self.surface.blit(lbl, (10, 10 + i * 20))

    def draw(self):
        self.draw_grid()
        self.draw_hud()

    def run_loop(self):
        self.start_search()

        while self.running:
            self.handle_input()
            self.draw()
            pygame.display.flip()
            self.clock.tick(30)

        self.cancel.set()
        self.worker.join(timeout=5.0)
        pygame.quit()
        return self.result

    def wait(self, timeout=None):
        """Blocks until the background search finishes (headless use)."""
        if self.worker is None:
            self.start_search()
        self.worker.join(timeout)
        if self.worker.is_alive():
            self.cancel.set()
            self.worker.join()
        return self.result
