import PyInstaller.__main__
import os
import shutil

# 빌드 옵션
options = [
    'main.py',
    '--name=SerialLyricDisplay',
    '--console',   # 틱 루프 로그를 콘솔에 출력
    '--onedir',    # 폴더 형태로 빌드 (settings.json, logs/ 를 실행 파일 옆에 둠)
    '--noconfirm',
    '--clean',
    '--hidden-import=serial.tools.list_ports',
]

# PyInstaller 실행
print("Building SerialLyricDisplay...")
PyInstaller.__main__.run(options)

# 설정 파일 복사
print("Copying configuration files...")
dist_dir = os.path.join('dist', 'SerialLyricDisplay')

if not os.path.exists(dist_dir):
    print(f"Error: Build directory not found at {dist_dir}")
    exit(1)

if os.path.exists('settings.json'):
    shutil.copy2('settings.json', dist_dir)
    print(f"Copied settings.json to {dist_dir}")
else:
    print("Warning: settings.json not found locally. Defaults will be written on first change.")

print("Build complete!")
print(f"Executable located at: {os.path.abspath(dist_dir)}")
