# NOTE: The preview window needs PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import logging
import os
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QSlider, QHBoxLayout, QCheckBox, QSpinBox
)
from PyQt5.QtGui import QPixmap, QImage, qRgb
from PyQt5.QtCore import Qt

from bmp_header import describe
from bmp_image import BMPImage

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.getenv('BMP_DEMO_OUTPUT', 'testiter.bmp')
DEFAULT_STEP = int(os.getenv('BMP_DEMO_STEP', '5'))


# Give logical pixel i (physical order) the grey level i * step
def paint_gradient(image, step=DEFAULT_STEP):
    it = image.begin()
    end = image.end()
    value = 0
    while it != end:
        pixel = it.pixel()
        pixel.green = value % 256
        pixel.blue = value % 256
        pixel.red = value % 256
        value += step
        it.increment()
    return image


def to_qimage(image, channels=(True, True, True), brightness=1.0):
    r_enabled, g_enabled, b_enabled = channels
    qimage = QImage(image.width, image.height, QImage.Format_RGB32)

    # cell() already maps row 0 to the top of the picture
    for y in range(image.height):
        for x in range(image.width):
            R, G, B = image.cell(y, x).pixel().rgb

            if not r_enabled:
                R = 0
            if not g_enabled:
                G = 0
            if not b_enabled:
                B = 0

            R = int(R * brightness)
            G = int(G * brightness)
            B = int(B * brightness)

            qimage.setPixel(x, y, qRgb(R, G, B))
    return qimage


class BMPViewer(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("BMP Writer")
        self.resize(700, 500)

        # Image currently shown in the preview
        self.image = None

        # RGB channels toggle and display settings
        self.r_enabled = True
        self.g_enabled = True
        self.b_enabled = True
        self.brightness = 1.0

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Image size inputs
        self.width_input = QSpinBox()
        self.width_input.setRange(1, 4096)
        self.width_input.setValue(5)
        self.height_input = QSpinBox()
        self.height_input.setRange(1, 4096)
        self.height_input.setValue(10)
        top_layout.addWidget(QLabel("Width"))
        top_layout.addWidget(self.width_input)
        top_layout.addWidget(QLabel("Height"))
        top_layout.addWidget(self.height_input)

        # Button to build and paint a new image
        self.generate_button = QPushButton("Generate")
        self.generate_button.setFixedSize(150, 50)
        self.generate_button.clicked.connect(self.generate_image)
        top_layout.addWidget(self.generate_button)

        # Button to save the image as a BMP file
        self.save_button = QPushButton("Save BMP File")
        self.save_button.setFixedSize(150, 50)
        self.save_button.clicked.connect(self.save_file)
        top_layout.addWidget(self.save_button)

        top_layout.addStretch()

        # Checkboxes to enable/disable R, G, B channels
        self.r_button = QCheckBox("R")
        self.g_button = QCheckBox("G")
        self.b_button = QCheckBox("B")

        self.r_button.clicked.connect(self.toggle_r)
        self.g_button.clicked.connect(self.toggle_g)
        self.b_button.clicked.connect(self.toggle_b)

        for btn in (self.r_button, self.g_button, self.b_button):
            btn.setChecked(True)
            btn.setFixedSize(30, 30)
            top_layout.addWidget(btn)

        layout.addLayout(top_layout)

        # Label to display the image
        self.image_label = QLabel("No Image Generated")
        self.image_label.setStyleSheet("border: 1px solid black; background: white;")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFixedSize(700, 400)
        layout.addWidget(self.image_label)

        # Text box to display BMP header fields
        self.metadata_box = QTextEdit("No Metadata")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        # Slider for brightness adjustment
        self.brightness_slider = QSlider(Qt.Horizontal)
        self.brightness_slider.setRange(0, 100)
        self.brightness_slider.setValue(100)
        self.brightness_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Brightness"))
        layout.addWidget(self.brightness_slider)

        self.setLayout(layout)

    def generate_image(self):
        self.image = paint_gradient(BMPImage(self.width_input.value(), self.height_input.value()))

        # Display header fields
        meta_text = ""
        for k, v in describe(self.image.width, self.image.height).items():
            meta_text += f"{k}: {v}\n"
        self.metadata_box.setText(meta_text)

        self.update_image()

    # Update image display based on settings
    def update_image(self):
        if self.image is None:
            return

        self.brightness = self.brightness_slider.value() / 100.0
        qimage = to_qimage(self.image, (self.r_enabled, self.g_enabled, self.b_enabled),
                           self.brightness)

        # Scale small images up so they are visible
        pixmap = QPixmap.fromImage(qimage).scaled(
            self.image_label.size(), Qt.KeepAspectRatio, Qt.FastTransformation)
        self.image_label.setPixmap(pixmap)

    # Toggle R channel
    def toggle_r(self):
        self.r_enabled = self.r_button.isChecked()
        self.update_image()

    # Toggle G channel
    def toggle_g(self):
        self.g_enabled = self.g_button.isChecked()
        self.update_image()

    # Toggle B channel
    def toggle_b(self):
        self.b_enabled = self.b_button.isChecked()
        self.update_image()

    def save_file(self):
        if self.image is None:
            return

        output_filepath, _ = QFileDialog.getSaveFileName(self, "Save BMP File", DEFAULT_OUTPUT, "BMP Files (*.bmp)")
        if not output_filepath:
            return

        try:
            written = self.image.save(output_filepath)
        except OSError as exc:
            self.metadata_box.append(f"Save failed: {exc}")
            return

        logger.info("Saved %s (%d bytes)", output_filepath, written)
        self.metadata_box.append(f"Saved to {output_filepath}")
        self.metadata_box.append(f"File size: {written} bytes")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = QApplication(sys.argv)
    viewer = BMPViewer()
    viewer.show()
    sys.exit(app.exec_())
