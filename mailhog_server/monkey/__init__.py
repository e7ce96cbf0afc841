"""
Chaos monkey: the Jim fault-injection policy and its persisted state.
"""

from mailhog_server.monkey.jim import Jim, Reporter
from mailhog_server.monkey.state import JimState, load_jim_state, save_jim_state

__all__ = ["Jim", "JimState", "Reporter", "load_jim_state", "save_jim_state"]
