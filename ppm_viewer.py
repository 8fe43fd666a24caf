import logging
import tkinter as tk
from tkinter import filedialog, messagebox, simpledialog
from pathlib import Path

from PIL import ImageTk

import viewer_style as style
from filters import (apply_averaging, apply_custom_mask, apply_gaussian, apply_sharpen,
                     apply_sobel_gradient, median_filter)
from histogram import compute_histogram, equalize_histogram, plot_histogram_image, stretch_histogram
from image_loader import ImageSession, save_image, DEFAULT_JPEG_QUALITY
from image_processing import apply_point_op, grayscale_average, grayscale_weighted
from kernels import KernelError, CROSS_3X3
from morphology import hit_or_miss, morphology
from ppmdecoder import DecodeError, ppm_header_info

logger = logging.getLogger(__name__)

DEFAULT_MASK = "0,-1,0\n-1,5,-1\n0,-1,0"
DEFAULT_ELEMENT = "\n".join(",".join(str(v) for v in row) for row in CROSS_3X3)


def _kernel_text(widget: tk.Text) -> str:
    return widget.get("1.0", "end").strip()


# ==== PPM Viewer ====
class PPMViewer(tk.Frame):
    def __init__(self, master, file_path=None):
        super().__init__(master, bg=style.BG_MAIN)
        self.master = master
        self.pack(fill="both", expand=True)
        self.session = ImageSession()

        # Toolbar
        toolbar = tk.Frame(self, bg=style.BG_TOOLBAR, padx=10, pady=8)
        toolbar.pack(side="top", fill="x")
        for text, cmd in (("Open", self.open_file), ("Save PPM", self.save_ppm),
                          ("Save JPEG", self.save_jpeg), ("Reset", self.reset),
                          ("Zoom In", self.zoom_in), ("Zoom Out", self.zoom_out)):
            tk.Button(toolbar, text=text, command=cmd, bg=style.BG_BUTTON, fg=style.FG_BUTTON,
                      font=style.FONT_BUTTON, relief="flat", padx=10, pady=4).pack(side="left", padx=5)

        # Main Frame
        main_frame = tk.Frame(self, bg=style.BG_MAIN)
        main_frame.pack(fill="both", expand=True, padx=10, pady=10)

        # Operations panel
        ops = tk.Frame(main_frame, bg=style.BG_PANEL, bd=2, relief="groove", padx=10, pady=10)
        ops.pack(side="left", fill="y", padx=(0, 10))
        self._build_operations(ops)

        # Canvas frame
        canvas_frame = tk.Frame(main_frame, bg=style.BG_MAIN)
        canvas_frame.pack(side="left", fill="both", expand=True)
        self.canvas = tk.Canvas(canvas_frame, bg=style.BG_PANEL, cursor="cross")
        self.canvas.pack(side="top", fill="both", expand=True)
        self.canvas.bind("<Button-1>", self.get_pixel_info)
        self.note = tk.Label(canvas_frame, text="Open a PPM, JPEG or PNG image to begin.",
                             bg=style.BG_MAIN, fg=style.FG_SUBTEXT, font=style.FONT_TEXT)
        self.note.pack(anchor="w", pady=4)
        self.hist_label = tk.Label(canvas_frame, bg=style.BG_MAIN)
        self.hist_label.pack(anchor="w")

        # Info Panel
        info_frame = tk.Frame(main_frame, bg=style.BG_PANEL, bd=2, relief="groove", padx=15, pady=15)
        info_frame.pack(side="right", fill="y", padx=(10, 0))
        tk.Label(info_frame, text="Pixel Info", font=style.FONT_HEADER,
                 bg=style.BG_PANEL, fg=style.FG_TEXT).pack(anchor="w", pady=(0, 5))
        self.pixel_label = tk.Label(info_frame, text="Click on the image to view pixel RGB values.",
                                    font=style.FONT_TEXT, justify="left", bg=style.BG_PANEL, fg=style.FG_SUBTEXT)
        self.pixel_label.pack(anchor="w", pady=(0, 10))
        tk.Label(info_frame, text="Header Info", font=style.FONT_HEADER,
                 bg=style.BG_PANEL, fg=style.FG_TEXT).pack(anchor="w", pady=(0, 5))
        self.header_text = tk.Text(info_frame, height=10, width=34, font=style.FONT_MONO,
                                   bg="#f9f9f9", relief="flat", wrap="none", state="disabled")
        self.header_text.pack(anchor="w")

        # Vars
        self.tk_img = None
        self.hist_img = None
        self.zoom_factor = 1.0

        if file_path:
            self.load(file_path)

    def _build_operations(self, parent):
        def section(title):
            tk.Label(parent, text=title, font=style.FONT_HEADER, bg=style.BG_PANEL,
                     fg=style.FG_TEXT).pack(anchor="w", pady=(8, 2))

        def button(text, cmd):
            tk.Button(parent, text=text, command=cmd, relief="flat", anchor="w").pack(fill="x")

        section("Point Transforms")
        for op in ("add", "subtract", "multiply", "divide", "brightness"):
            button(f"{op.capitalize()}…", lambda o=op: self.ui_point_op(o))
        button("Grayscale (average)", lambda: self.run(grayscale_average, "Grayscale: (R+G+B)/3"))
        button("Grayscale (weighted)", lambda: self.run(grayscale_weighted, "Grayscale: 0.299R+0.587G+0.114B"))

        section("Histogram")
        button("Stretch", lambda: self.run(stretch_histogram, "Histogram stretched"))
        button("Equalize", lambda: self.run(equalize_histogram, "Histogram equalized"))

        section("Binarization")
        button("Manual threshold…", self.ui_manual_threshold)
        button("Percent black…", self.ui_percent_black)
        button("Iterative means", lambda: self.binarize("iterative_mean"))
        button("Maximum entropy", lambda: self.binarize("max_entropy"))

        section("Filters")
        button("Averaging (N×N)…", self.ui_average)
        button("Median (N×N)…", self.ui_median)
        button("Gaussian blur", lambda: self.run(apply_gaussian, "Gaussian 3x3 (1/16)"))
        button("Sharpen", lambda: self.run(apply_sharpen, "Sharpen 3x3"))
        button("Sobel gradient", lambda: self.run(apply_sobel_gradient, "Gradient magnitude (Sobel)"))
        self.mask_text = tk.Text(parent, height=3, width=18, font=style.FONT_MONO)
        self.mask_text.insert("1.0", DEFAULT_MASK)
        self.mask_text.pack(fill="x", pady=2)
        button("Apply custom mask", self.ui_custom_mask)

        section("Morphology")
        self.element_text = tk.Text(parent, height=3, width=18, font=style.FONT_MONO)
        self.element_text.insert("1.0", DEFAULT_ELEMENT)
        self.element_text.pack(fill="x", pady=2)
        for op in ("erosion", "dilation", "opening", "closing"):
            button(op.capitalize(), lambda o=op: self.ui_morphology(o))
        for mode in ("match", "thinning", "thickening"):
            button(f"Hit-or-miss: {mode}", lambda m=mode: self.ui_hit_or_miss(m))

    # ==== File Handling ====
    def open_file(self):
        file_path = filedialog.askopenfilename(filetypes=[("Images", "*.ppm *.pnm *.jpg *.jpeg *.png *.bmp"),
                                                          ("PPM files", "*.ppm")])
        if file_path:
            self.load(file_path)

    def load(self, file_path):
        try:
            self.session.load(file_path)
        except DecodeError as e:
            logger.warning("Failed to open %s: %s", file_path, e)
            messagebox.showerror("Error", f"Failed to open image:\n{e}")
            return
        self.zoom_factor = 1.0
        self.show_header_info(Path(file_path))
        self.refresh(f"Loaded {Path(file_path).name}")

    def save_ppm(self):
        if not self.ensure_loaded(): return
        path = filedialog.asksaveasfilename(defaultextension=".ppm", initialfile="image.ppm",
                                            filetypes=[("PPM files", "*.ppm")])
        if path:
            save_image(self.session.current, path)

    def save_jpeg(self):
        if not self.ensure_loaded(): return
        q = simpledialog.askinteger("JPEG quality", "Quality (1-100):", initialvalue=DEFAULT_JPEG_QUALITY,
                                    minvalue=1, maxvalue=100)
        if q is None: return
        path = filedialog.asksaveasfilename(defaultextension=".jpg", initialfile="image.jpg",
                                            filetypes=[("JPEG files", "*.jpg *.jpeg")])
        if path:
            save_image(self.session.current, path, quality=q)

    def reset(self):
        if not self.ensure_loaded(): return
        self.session.reset()
        self.refresh("Reset to original")

    def ensure_loaded(self):
        if not self.session.loaded:
            messagebox.showwarning("No image", "Load an image first.")
            return False
        return True

    # ==== Display & Zoom ====
    def refresh(self, note_text=""):
        buf = self.session.current
        img = buf.to_image()
        w = max(1, int(img.width*self.zoom_factor))
        h = max(1, int(img.height*self.zoom_factor))
        self.tk_img = ImageTk.PhotoImage(img.resize((w, h)))
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, anchor="nw", image=self.tk_img)
        self.canvas.config(scrollregion=self.canvas.bbox("all"))

        hist = compute_histogram(buf)
        self.hist_img = ImageTk.PhotoImage(
            plot_histogram_image(hist, threshold=self.session.threshold, color=style.HISTOGRAM_COLOR))
        self.hist_label.config(image=self.hist_img)
        self.note.config(text=note_text)

    def zoom_in(self):
        if self.session.loaded:
            self.zoom_factor *= style.ZOOM_STEP
            self.refresh(self.note.cget("text"))

    def zoom_out(self):
        if self.session.loaded:
            self.zoom_factor /= style.ZOOM_STEP
            self.refresh(self.note.cget("text"))

    def get_pixel_info(self, event):
        buf = self.session.current
        if buf is None: return
        x = int(self.canvas.canvasx(event.x)/self.zoom_factor)
        y = int(self.canvas.canvasy(event.y)/self.zoom_factor)
        if 0 <= x < buf.width and 0 <= y < buf.height:
            r, g, b, _ = buf.pixel(x, y)
            self.pixel_label.config(text=f"X:{x}\nY:{y}\nR:{r}\nG:{g}\nB:{b}")

    def show_header_info(self, path: Path):
        buf = self.session.original
        if path.suffix.lower() in (".ppm", ".pnm"):
            info = ppm_header_info(path)
        else:
            info = {"Filename": path.name, "Image Dimensions": f"{buf.width} × {buf.height}"}
        info["Pixels"] = buf.pixel_count
        self.header_text.configure(state="normal")
        self.header_text.delete("1.0", "end")
        self.header_text.insert("1.0", "\n".join(f"{k}: {v}" for k, v in info.items()))
        self.header_text.configure(state="disabled")

    # ==== Operations ====
    def run(self, fn, note_text, *args):
        if not self.ensure_loaded(): return
        try:
            self.session.apply(fn, *args)
        except (KernelError, ValueError) as e:
            messagebox.showerror("Error", str(e))
            return
        self.session.threshold = None
        self.refresh(note_text)

    def binarize(self, strategy, **params):
        if not self.ensure_loaded(): return
        try:
            result = self.session.binarize(strategy, **params)
        except ValueError as e:
            messagebox.showerror("Error", str(e))
            return
        self.refresh(f"Binarized ({strategy.replace('_', ' ')}), threshold = {result.threshold}")

    def ui_point_op(self, op):
        if not self.ensure_loaded(): return
        v = simpledialog.askfloat(op.capitalize(), f"Value for {op}:")
        if v is None: return
        self.run(apply_point_op, f"{op.capitalize()} {v}", op, v)

    def ui_manual_threshold(self):
        if not self.ensure_loaded(): return
        t = simpledialog.askinteger("Threshold", "Threshold (0-255):", initialvalue=128, minvalue=0, maxvalue=255)
        if t is not None:
            self.binarize("manual", threshold=t)

    def ui_percent_black(self):
        if not self.ensure_loaded(): return
        p = simpledialog.askfloat("Percent black", "Black pixels (%):", initialvalue=50, minvalue=0, maxvalue=100)
        if p is not None:
            self.binarize("percent_black", percent=p)

    def ui_average(self):
        n = simpledialog.askinteger("Averaging", "Window size N:", initialvalue=3, minvalue=1)
        if n is not None:
            self.run(apply_averaging, f"Averaging filter: {n}x{n} box (1/{n*n})", n)

    def ui_median(self):
        n = simpledialog.askinteger("Median", "Window size N:", initialvalue=3, minvalue=1)
        if n is not None:
            self.run(median_filter, f"Median filter: {n}x{n} window", n)

    def ui_custom_mask(self):
        self.run(apply_custom_mask, "Custom mask", _kernel_text(self.mask_text))

    def ui_morphology(self, op):
        self.run(morphology, op.capitalize(), _kernel_text(self.element_text), op)

    def ui_hit_or_miss(self, mode):
        self.run(hit_or_miss, f"Hit-or-miss ({mode})", _kernel_text(self.element_text), mode)


# ==== Main ====
if __name__ == "__main__":
    root = tk.Tk()
    root.title("PPM Image Lab")
    root.geometry("1400x900")
    app = PPMViewer(root)
    root.mainloop()
