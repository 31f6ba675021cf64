"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- random_walk：下一根 K 棒的目標值
- path_animator：K 棒動畫的插值
- axis_bounds：Y 軸範圍
- signal_service：moonshot / 趨勢訊號
- projection_service：快照轉成圖表 frame
"""
