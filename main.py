import logging
import tkinter as tk
from tkinter import filedialog
from ppm_viewer import PPMViewer


def setup_logging():
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[logging.StreamHandler()])


class ImageApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("Computer Graphics Lab – Image Processing")
        self.geometry("1400x900")
        self.viewer_frame = None

        # Menu
        menubar = tk.Menu(self)
        file_menu = tk.Menu(menubar, tearoff=0)
        file_menu.add_command(label="Open PPM", command=self.open_ppm)
        file_menu.add_command(label="Open Image", command=self.open_image)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.quit)
        menubar.add_cascade(label="File", menu=file_menu)
        self.config(menu=menubar)

        self.show_viewer(None)

    def show_viewer(self, file_path):
        if self.viewer_frame:
            self.viewer_frame.destroy()
        self.viewer_frame = PPMViewer(self, file_path)
        self.viewer_frame.pack(fill="both", expand=True)

    def open_ppm(self):
        file_path = filedialog.askopenfilename(filetypes=[("PPM Files", "*.ppm *.pnm")])
        if file_path:
            self.viewer_frame.load(file_path)

    def open_image(self):
        file_path = filedialog.askopenfilename(filetypes=[("Image Files", "*.png *.jpg *.jpeg *.bmp")])
        if file_path:
            self.viewer_frame.load(file_path)


def main():
    setup_logging()
    app = ImageApp()
    app.mainloop()


if __name__ == "__main__":
    main()
