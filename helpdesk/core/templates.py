import os

from fastapi.templating import Jinja2Templates

from .constants import CATEGORY_LABELS, PRIORITY_LABELS, STATUS_LABELS

# Calculate paths relative to this file: helpdesk/core/templates.py
# helpdesk/core/ -> helpdesk/ -> {project_root}/templates
current_dir = os.path.dirname(os.path.abspath(__file__))
templates_dir = os.path.join(current_dir, "..", "..", "templates")
templates_dir = os.path.normpath(templates_dir)

templates = Jinja2Templates(directory=templates_dir)

# Label lookups keyed by the raw enum value stored in the DB
templates.env.globals["STATUS_LABELS"] = {k.value: v for k, v in STATUS_LABELS.items()}
templates.env.globals["PRIORITY_LABELS"] = {k.value: v for k, v in PRIORITY_LABELS.items()}
templates.env.globals["CATEGORY_LABELS"] = {k.value: v for k, v in CATEGORY_LABELS.items()}
