"""
Main NiceGUI application for the mind-map editor.

Hosts a single mind-map document in memory and renders it with the
MindMapController page from mindmap.page. Persistence of the document
belongs to the surrounding note editor; here every commit is only logged.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

from mindmap.config import get_editor_settings
from mindmap.page import render_mindmap

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

settings = get_editor_settings()
logger.info(f"Editor settings: {settings}")

# Same starting content the note editor gives a fresh mind-map block
document = {
    'nodes': [{'id': 'central-idea', 'text': 'Central Idea', 'x': 150, 'y': 150, 'color': 'sage'}],
    'connections': [],
    'title': 'Mind Map',
}


def log_commit(doc):
    logger.info(f"Committed '{doc['title']}': {len(doc['nodes'])} nodes, {len(doc['connections'])} connections")


@ui.page('/')
def main_page():
    ui.dark_mode().enable()
    with ui.column().classes('w-full items-center gap-3 p-4'):
        render_mindmap(document, settings=settings, on_commit=log_commit)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Mind Map',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
