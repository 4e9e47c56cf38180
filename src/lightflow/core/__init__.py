"""流れ場の中核（ノイズ・角度場・トレース・スポーン・スタイル・設定）。"""
