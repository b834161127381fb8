from flask import Blueprint

ui = Blueprint('ui', __name__)


@ui.route("/")
def index():
    """
    Just to verify that things are working.
    """
    return "There's nothing here!"
