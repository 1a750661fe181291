import sys
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QIcon, QTextOption
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QTextEdit, QPlainTextEdit, QVBoxLayout, QSplitter,
    QGroupBox, QDockWidget, QFileDialog, QToolBar
)

import common
import assembler
import main as cli

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("ROM16 Assembler")
        self.setGeometry(100, 100, 1200, 800)

        # Create main horizontal splitter
        main_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(main_splitter)

        # Left-side vertical splitter (Code Editor and Message Log)
        left_vertical_splitter = QSplitter(Qt.Orientation.Vertical)
        main_splitter.addWidget(left_vertical_splitter)

        # Code Editor (left pane)
        self.code_editor = QPlainTextEdit()
        self.code_editor.setWordWrapMode(QTextOption.NoWrap)
        self.code_dock = QDockWidget("Code Editor", self)
        self.code_dock.setWidget(self.code_editor)
        left_vertical_splitter.addWidget(self.code_dock)

        # Message Log (bottom-left pane)
        log_group = QGroupBox("Messages")
        log_layout = QVBoxLayout(log_group)
        self.message_log = QTextEdit()
        self.message_log.setReadOnly(True)
        log_layout.addWidget(self.message_log)
        left_vertical_splitter.addWidget(log_group)

        left_vertical_splitter.setStretchFactor(0, 3)
        left_vertical_splitter.setStretchFactor(1, 1)

        # ROM image (right pane)
        image_group = QGroupBox("ROM Image")
        image_layout = QVBoxLayout(image_group)
        self.image_view = QPlainTextEdit()
        self.image_view.setReadOnly(True)
        self.image_view.setWordWrapMode(QTextOption.NoWrap)
        image_layout.addWidget(self.image_view)
        main_splitter.addWidget(image_group)

        main_splitter.setStretchFactor(0, 1)
        main_splitter.setStretchFactor(1, 1)

        # Create Toolbar
        self.toolbar = QToolBar("Main Toolbar")
        self.addToolBar(self.toolbar)

        # File Menu Actions
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction(QIcon.fromTheme("document-open"), "Open...", self)
        open_action.triggered.connect(self.open_file)
        file_menu.addAction(open_action)

        save_action = QAction(QIcon.fromTheme("document-save"), "Save", self)
        save_action.triggered.connect(self.save_file)
        file_menu.addAction(save_action)

        save_as_action = QAction(QIcon.fromTheme("document-save-as"), "Save As...", self)
        save_as_action.triggered.connect(self.save_file_as)
        file_menu.addAction(save_as_action)

        export_action = QAction(QIcon.fromTheme("document-export"), "Export Image...", self)
        export_action.triggered.connect(self.export_image)
        file_menu.addAction(export_action)

        # Add file actions to toolbar
        self.toolbar.addAction(open_action)
        self.toolbar.addAction(save_action)
        self.toolbar.addAction(export_action)

        self.last_asm_info = None
        self.current_file = None

        # Every edit reassembles the whole program
        self.code_editor.textChanged.connect(self.reassemble)
        self.reassemble()

    def reassemble(self):
        self.message_log.clear()
        source_code = self.code_editor.toPlainText()
        try:
            asm_info = assembler.assembler(source_code)
        except common.AsmError as e:
            self.last_asm_info = None
            self.image_view.clear()
            for xs in common.error_chain(e):
                self.message_log.append(f"Error: {xs}")
            return False

        self.last_asm_info = asm_info
        self.image_view.setPlainText(asm_info.image)
        for msg, line_index in asm_info.warnings:
            self.message_log.append(f"line {line_index + 1}: {msg}")
        return True

    def open_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Assembly File", ".", "Assembly Files (*.txt *.asm);;All Files (*)")
        if file_name:
            try:
                with open(file_name, 'r', encoding='utf-8') as f:
                    self.load_text(f.read())
                self.set_current_file(file_name)
            except OSError as e:
                self.message_log.append(f"Error opening file: {e}")

    def load_text(self, text):
        self.code_editor.setPlainText(text)

    def set_current_file(self, file_name):
        self.current_file = file_name
        self.setWindowTitle(f"ROM16 Assembler - {file_name}")

    def save_file(self):
        if self.current_file:
            try:
                with open(self.current_file, 'w', encoding='utf-8') as f:
                    f.write(self.code_editor.toPlainText())
                self.message_log.append(f"File saved: {self.current_file}")
            except OSError as e:
                self.message_log.append(f"Error saving file: {e}")
        else:
            self.save_file_as()

    def save_file_as(self):
        file_name, _ = QFileDialog.getSaveFileName(self, "Save Assembly File As", ".", "Assembly Files (*.txt *.asm);;All Files (*)")
        if file_name:
            try:
                with open(file_name, 'w', encoding='utf-8') as f:
                    f.write(self.code_editor.toPlainText())
                self.set_current_file(file_name)
                self.message_log.append(f"File saved as: {self.current_file}")
            except OSError as e:
                self.message_log.append(f"Error saving file: {e}")

    def export_image(self):
        if self.last_asm_info is None:
            self.message_log.append("Nothing to export: the program does not assemble")
            return
        default_name = cli.output_path_for(self.current_file) if self.current_file else "."
        file_name, _ = QFileDialog.getSaveFileName(self, "Export ROM Image", default_name, "ROM Images (*.hex);;All Files (*)")
        if file_name:
            try:
                with open(file_name, 'w', encoding='utf-8') as f:
                    f.write(self.last_asm_info.image)
                self.message_log.append(f"Image written to: {file_name}")
            except OSError as e:
                self.message_log.append(f"Error writing image: {e}")

def start_gui(file_name=None):
    app = QApplication(sys.argv)
    app.setStyleSheet("""
    QMainWindow {
        background-color: #1a1a1a;
        color: #e0e0e0;
    }
    QPlainTextEdit, QTextEdit {
        background-color: #2a2a2a;
        color: #00ff00;
        border: 1px solid #007acc;
        padding: 5px;
        font-family: "Consolas", "Monaco", "Courier New", monospace;
        font-size: 10pt;
    }
    QGroupBox {
        background-color: #1a1a1a;
        color: #e0e0e0;
        border: 1px solid #007acc;
        border-radius: 4px;
        margin-top: 10px;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        subcontrol-position: top left;
        padding: 0 3px;
        color: #00ff00;
        font-weight: bold;
    }
    QMenuBar {
        background-color: #2a2a2a;
        color: #e0e0e0;
    }
    QMenuBar::item:selected {
        background-color: #007acc;
    }
    QToolBar {
        background-color: #2a2a2a;
        border: none;
        padding: 5px;
    }
    """)
    window = MainWindow()
    if file_name:
        try:
            with open(file_name, 'r', encoding='utf-8') as f:
                window.load_text(f.read())
        except FileNotFoundError:
            window.message_log.append(f"New file: {file_name}")
        window.set_current_file(file_name)
    window.show()
    return app.exec()
