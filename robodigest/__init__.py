"""
RoboDigest - ロボティクス研究ダッシュボード（arXiv 論文 + YouTube 動画）
"""
