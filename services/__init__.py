"""
服務層

這個 package 包含純計算邏輯與金額保管，不負責狀態轉換：
- SafeMath：uint256 的 checked arithmetic
- Addresses：地址與 commitment 的格式處理
- Treasury：保管押注、結算轉帳
"""
