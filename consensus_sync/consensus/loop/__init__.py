from .convergence_loop import ConvergenceLoop as ConvergenceLoop
from .loop_context import LoopContext as LoopContext
