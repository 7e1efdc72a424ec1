from __future__ import annotations

COLORS = {
    "primary": "#2D6CDF",
    "danger": "#D64545",
    "success": "#2E9E5B",
    "warning": "#E6A23C",
    "background": "#F5F7FA",
    "surface": "#FFFFFF",
    "text_primary": "#1F2937",
    "text_secondary": "#6B7280",
}

ESTADO_COLORS = {
    "pendiente": COLORS["warning"],
    "procesado": COLORS["primary"],
    "entregado": COLORS["success"],
}

SPACING = {
    "xs": 4,
    "sm": 8,
    "md": 12,
    "lg": 16,
}

RADIUS = {
    "sm": 4,
    "md": 8,
}


def build_stylesheet() -> str:
    return f"""
QWidget {{
    background-color: {COLORS['background']};
    color: {COLORS['text_primary']};
    font-size: 13px;
}}

QFrame[role="card"] {{
    background-color: {COLORS['surface']};
    border: 1px solid {COLORS['background']};
    border-radius: {RADIUS['md']}px;
    padding: {SPACING['md']}px;
}}

QLabel[role="cardTitle"] {{
    color: {COLORS['text_secondary']};
    background-color: transparent;
}}

QLabel[role="cardValue"] {{
    font-size: 20px;
    font-weight: bold;
    background-color: transparent;
}}

QLabel[role="banner"] {{
    background-color: {COLORS['warning']};
    color: {COLORS['surface']};
    border-radius: {RADIUS['sm']}px;
    padding: {SPACING['sm']}px;
}}

QPushButton {{
    background-color: {COLORS['surface']};
    color: {COLORS['text_primary']};
    border: 1px solid {COLORS['text_secondary']};
    border-radius: {RADIUS['sm']}px;
    padding: {SPACING['sm']}px {SPACING['lg']}px;
}}

QPushButton:hover {{
    border-color: {COLORS['primary']};
}}

QPushButton[variant="primary"] {{
    background-color: {COLORS['primary']};
    color: {COLORS['surface']};
    border: 1px solid {COLORS['primary']};
}}

QPushButton[variant="danger"] {{
    background-color: {COLORS['danger']};
    color: {COLORS['surface']};
    border: 1px solid {COLORS['danger']};
}}

QLineEdit,
QComboBox,
QDateEdit,
QDoubleSpinBox,
QSpinBox,
QPlainTextEdit {{
    background-color: {COLORS['surface']};
    border: 1px solid {COLORS['text_secondary']};
    border-radius: {RADIUS['sm']}px;
    padding: {SPACING['xs']}px;
}}

QTableView {{
    background-color: {COLORS['surface']};
    gridline-color: {COLORS['background']};
    border: 1px solid {COLORS['text_secondary']};
    border-radius: {RADIUS['sm']}px;
    selection-background-color: {COLORS['primary']};
    selection-color: {COLORS['surface']};
}}
"""
