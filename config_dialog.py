from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout,
    QLineEdit, QCheckBox,
    QDialogButtonBox
)
from PySide6.QtCore import Qt

from core.settings import DEFAULT_SETTINGS


class ConfigDialog(QDialog):
    def __init__(self, parent=None, values: dict | None = None):
        super().__init__(parent)
        self.setWindowTitle("Configuraciones")
        self._build_ui()
        self.set_values(values or DEFAULT_SETTINGS)

    def _build_ui(self):
        # Layout principal
        layout = QVBoxLayout(self)

        # Formulario de ajustes
        form = QFormLayout()
        # Modo oscuro
        self.theme_checkbox = QCheckBox()
        form.addRow("Tema oscuro:", self.theme_checkbox)

        # Medición sobre la esfera o en el plano del lienzo
        self.geodesic_checkbox = QCheckBox()
        form.addRow("Medición geodésica:", self.geodesic_checkbox)

        # Carpeta por defecto
        self.default_dir_edit = QLineEdit()
        self.default_dir_edit.setPlaceholderText("Ruta por defecto")
        form.addRow("Carpeta por defecto:", self.default_dir_edit)

        layout.addLayout(form)

        # Botones Aceptar / Cancelar
        buttons = QDialogButtonBox(
            QDialogButtonBox.Ok | QDialogButtonBox.Cancel,
            Qt.Horizontal, self
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def set_values(self, values: dict):
        self.theme_checkbox.setChecked(bool(values.get("dark_mode", False)))
        self.geodesic_checkbox.setChecked(bool(values.get("geodesic", True)))
        self.default_dir_edit.setText(values.get("default_dir") or "")

    def get_values(self):
        """
        Devuelve un dict con los valores ingresados,
        tras un exec() exitoso.
        """
        return {
            "dark_mode":   self.theme_checkbox.isChecked(),
            "geodesic":    self.geodesic_checkbox.isChecked(),
            "default_dir": self.default_dir_edit.text().strip()
        }
