"""
Routes package
Flask Blueprint들을 관리하는 패키지
"""

from app.routes.base import base_blueprint
from app.routes.charging import charging_blueprint
from app.routes.account import account_blueprint
from app.routes.leaderboard import leaderboard_blueprint
from app.routes.p2p import p2p_blueprint
from app.routes.market import market_blueprint

__all__ = [
    'base_blueprint',
    'charging_blueprint',
    'account_blueprint',
    'leaderboard_blueprint',
    'p2p_blueprint',
    'market_blueprint'
]
