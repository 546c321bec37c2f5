"""
Stock Heatmap Dashboard
市場ヒートマップ・過去チャート・サマリーカードを提供するStreamlitダッシュボード。
"""

__version__ = "0.1.0"
