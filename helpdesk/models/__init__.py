from .user import User
from .ticket import Ticket, Comment
