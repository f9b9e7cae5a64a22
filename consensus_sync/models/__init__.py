from .destination import Destination as Destination
from .estimate import Estimate as Estimate
from .message import Message as Message
