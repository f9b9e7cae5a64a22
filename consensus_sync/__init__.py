from .env import Env as Env, load_env as load_env
from .models import Destination as Destination, Estimate as Estimate, Message as Message
