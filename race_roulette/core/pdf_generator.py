"""Printable race day scoreboard PDF.

Generates a letter-size PDF with:
- Leaderboard page: title, red rank ovals, team totals and averages
- One roster page per team with tier dividers
- Footer with the generation date on every page
"""

import datetime

import fitz  # PyMuPDF

from .team_assigner import TIER_ORDER

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792
LEFT_MARGIN = 56
RIGHT_MARGIN = PAGE_W - 56

TITLE_Y = 60
SUBTITLE_Y = 84
HEADERS_Y = 130
ROWS_START_Y = 160
ROW_HEIGHT = 28
FOOTER_Y = PAGE_H - 20
ROWS_BOTTOM_Y = PAGE_H - 50

# Leaderboard column x positions
COL_RANK = LEFT_MARGIN + 14
COL_TEAM = LEFT_MARGIN + 44
COL_TOTAL = 380
COL_EVENTS = 450
COL_AVERAGE = 520

TITLE_SIZE = 22
SUBTITLE_SIZE = 12
HEADER_SIZE = 10
ROW_SIZE = 12
RANK_SIZE = 11
NAME_SIZE = 11
FOOTER_SIZE = 7

FONT_REGULAR = 'Helvetica'
FONT_BOLD = 'Helvetica-Bold'

RED = (0.8, 0, 0)
WHITE = (1, 1, 1)
BLACK = (0, 0, 0)
GRAY = (0.45, 0.45, 0.45)


def generate_scoreboard_pdf(scores: list, teams: list, output_path: str,
                            title: str = 'Race Roulette'):
    """Generate the leaderboard plus team roster pages.

    Args:
        scores: Ranked TeamScore list (may be empty before any results).
        teams: Teams whose rosters get a page each.
        output_path: Where to save the PDF.
        title: Heading printed on every page.
    """
    stamp = datetime.date.today().isoformat()
    doc = fitz.open()

    page = doc.new_page(width=PAGE_W, height=PAGE_H)
    _draw_centered(page, TITLE_Y, title, FONT_BOLD, TITLE_SIZE)
    _draw_centered(page, SUBTITLE_Y, 'Team Standings', FONT_REGULAR, SUBTITLE_SIZE, GRAY)
    if scores:
        _draw_leaderboard(doc, page, scores, title, stamp)
    else:
        _draw_centered(page, ROWS_START_Y, 'No results recorded yet',
                       FONT_REGULAR, ROW_SIZE, GRAY)
        _draw_footer(page, stamp)

    for team in teams:
        page = doc.new_page(width=PAGE_W, height=PAGE_H)
        _draw_centered(page, TITLE_Y, title, FONT_BOLD, TITLE_SIZE)
        _draw_centered(page, SUBTITLE_Y, f'{team.name} Roster',
                       FONT_REGULAR, SUBTITLE_SIZE, GRAY)
        _draw_roster(page, team)
        _draw_footer(page, stamp)

    doc.save(output_path)
    doc.close()


# --- Drawing functions ---

def _draw_leaderboard(doc, page, scores, title, stamp):
    """Draw ranked rows, continuing on new pages when the page fills up."""
    _draw_headers(page)
    y = ROWS_START_Y
    for rank, score in enumerate(scores, start=1):
        if y > ROWS_BOTTOM_Y:
            _draw_footer(page, stamp)
            page = doc.new_page(width=PAGE_W, height=PAGE_H)
            _draw_centered(page, TITLE_Y, title, FONT_BOLD, TITLE_SIZE)
            _draw_headers(page)
            y = ROWS_START_Y

        _draw_rank_oval(page, rank, y)
        page.insert_text(fitz.Point(COL_TEAM, y), score.name,
                         fontname=FONT_BOLD, fontsize=ROW_SIZE, color=BLACK)
        for x, value in ((COL_TOTAL, score.total_score),
                         (COL_EVENTS, score.event_count),
                         (COL_AVERAGE, score.average_score)):
            _draw_right(page, x, y, str(value), FONT_REGULAR, ROW_SIZE)

        page.draw_line(fitz.Point(LEFT_MARGIN, y + 9), fitz.Point(RIGHT_MARGIN, y + 9),
                       color=GRAY, width=0.25)
        y += ROW_HEIGHT
    _draw_footer(page, stamp)


def _draw_headers(page):
    page.insert_text(fitz.Point(COL_TEAM, HEADERS_Y), 'TEAM',
                     fontname=FONT_BOLD, fontsize=HEADER_SIZE, color=RED)
    for x, label in ((COL_TOTAL, 'POINTS'), (COL_EVENTS, 'EVENTS'), (COL_AVERAGE, 'AVG')):
        _draw_right(page, x, HEADERS_Y, label, FONT_BOLD, HEADER_SIZE, RED)
    page.draw_line(fitz.Point(LEFT_MARGIN, HEADERS_Y + 6),
                   fitz.Point(RIGHT_MARGIN, HEADERS_Y + 6), color=RED, width=0.75)


def _draw_rank_oval(page, rank, y):
    """Red filled oval with the white rank number."""
    label = str(rank)
    tw = fitz.get_text_length(label, fontname=FONT_BOLD, fontsize=RANK_SIZE)
    rect = fitz.Rect(COL_RANK - 11, y - 14, COL_RANK + 11, y + 5)
    page.draw_oval(rect, color=RED, fill=RED)
    page.insert_text(fitz.Point(COL_RANK - tw / 2, y), label,
                     fontname=FONT_BOLD, fontsize=RANK_SIZE, color=WHITE)


def _draw_roster(page, team):
    y = HEADERS_Y
    line_height = NAME_SIZE * 1.5
    for tier in TIER_ORDER:
        members = [a for a in team.athletes if a.tier == tier]
        if not members:
            continue
        page.insert_text(fitz.Point(LEFT_MARGIN, y), f'{tier.value.upper()} TIER',
                         fontname=FONT_BOLD, fontsize=HEADER_SIZE, color=RED)
        page.draw_line(fitz.Point(LEFT_MARGIN, y + 4), fitz.Point(RIGHT_MARGIN, y + 4),
                       color=RED, width=0.5)
        y += line_height + 4
        for athlete in members:
            if y > ROWS_BOTTOM_Y:
                return
            page.insert_text(fitz.Point(LEFT_MARGIN + 12, y), athlete.name,
                             fontname=FONT_REGULAR, fontsize=NAME_SIZE, color=BLACK)
            if athlete.best_events:
                _draw_right(page, RIGHT_MARGIN, y, athlete.best_events,
                            FONT_REGULAR, NAME_SIZE - 2, GRAY)
            y += line_height
        y += 8


def _draw_centered(page, y, text, font, size, color=BLACK):
    tw = fitz.get_text_length(text, fontname=font, fontsize=size)
    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, y), text,
                     fontname=font, fontsize=size, color=color)


def _draw_right(page, right_x, y, text, font, size, color=BLACK):
    tw = fitz.get_text_length(text, fontname=font, fontsize=size)
    page.insert_text(fitz.Point(right_x - tw, y), text,
                     fontname=font, fontsize=size, color=color)


def _draw_footer(page, stamp):
    _draw_centered(page, FOOTER_Y, f'Generated {stamp}', FONT_REGULAR, FOOTER_SIZE, GRAY)
